"""
Live capture: microphone / sound card -> CWDecoder buffer.

sounddevice delivers float32 blocks on its own audio thread. LiveCapture
copies the first channel of each block into the decoder's buffer under a
lock, and decode() takes the same lock for its snapshot, so feeding and
decoding may run on different threads.

    dec = CWDecoder(sample_rate=8000)
    with LiveCapture(dec, device=None) as cap:
        time.sleep(10)
        print(cap.decode().text)

Requirements: pip install sounddevice   (the `live` extra)
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

import numpy as np

from .decoder import CWDecoder, DecodeResult
from .errors import CaptureError

log = logging.getLogger(__name__)


def _sounddevice():
    try:
        import sounddevice as sd
    except (ImportError, OSError) as e:
        # OSError: the module is installed but PortAudio is missing
        raise CaptureError(f"live capture needs sounddevice/PortAudio: {e}") from e
    return sd


def list_devices() -> List[Tuple[int, str, int, float]]:
    """(index, name, input channels, default sample rate) for input devices."""
    sd = _sounddevice()
    out = []
    for idx, dev in enumerate(sd.query_devices()):
        if dev["max_input_channels"] > 0:
            out.append((idx, dev["name"], int(dev["max_input_channels"]),
                        float(dev["default_samplerate"])))
    return out


class LiveCapture:

    def __init__(self, decoder: CWDecoder, device=None, blocksize: int = 1024):
        self.decoder   = decoder
        self.device    = device
        self.blocksize = int(blocksize)
        self.overflows = 0

        self._lock   = threading.Lock()
        self._stream = None

    # ------------------------------------------------------------------
    # Stream control
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._stream is not None:
            return
        sd = _sounddevice()
        try:
            self._stream = sd.InputStream(
                samplerate = self.decoder.sample_rate,
                device     = self.device,
                channels   = 1,
                dtype      = "float32",
                blocksize  = self.blocksize,
                callback   = self._callback,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise CaptureError(f"could not open input device {self.device!r}: {e}") from e
        log.debug("capturing from %r at %.0f Hz", self.device, self.decoder.sample_rate)

    def stop(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None

    def __enter__(self) -> "LiveCapture":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Audio thread
    # ------------------------------------------------------------------

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            self.overflows += 1
        block = np.asarray(indata, dtype=np.float64)
        if block.ndim > 1:
            block = block[:, 0]
        with self._lock:
            self.decoder.feed_block(block)

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def snapshot(self, window: Optional[float] = None) -> np.ndarray:
        with self._lock:
            return self.decoder.buffer.snapshot(window)

    def decode(self, window: Optional[float] = None) -> DecodeResult:
        # decode outside the lock; only the copy needs it
        return self.decoder.decode_samples(self.snapshot(window))
