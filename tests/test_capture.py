import sys

import numpy as np
import pytest

from cwdecode.capture import LiveCapture, _sounddevice
from cwdecode.decoder import CWDecoder
from cwdecode.errors import CaptureError


def test_callback_feeds_first_channel(sos_clean):
    sr, x = sos_clean
    cap = LiveCapture(CWDecoder(sr))
    block = 1024
    for i in range(0, len(x), block):
        chunk = x[i:i + block].astype(np.float32)
        indata = np.stack((chunk, np.zeros_like(chunk)), axis=1)
        cap._callback(indata, len(chunk), None, None)

    assert len(cap.snapshot()) == len(x)
    assert cap.decode().text == "SOS"
    assert cap.decoder.last_result is not None
    assert cap.overflows == 0


def test_callback_counts_status_flags():
    cap = LiveCapture(CWDecoder(8000))
    cap._callback(np.zeros((16, 1), dtype=np.float32), 16, None, "input overflow")
    assert cap.overflows == 1
    assert len(cap.snapshot()) == 16


def test_stop_without_start_is_noop():
    LiveCapture(CWDecoder(8000)).stop()


def test_missing_backend_raises_capture_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "sounddevice", None)
    with pytest.raises(CaptureError):
        _sounddevice()
