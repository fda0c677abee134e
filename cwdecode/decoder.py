"""
CWDecoder
=========
Morse audio -> text. One pipeline serves both batch and streaming use:

    samples -> tone estimate -> envelope -> runs -> unit -> noise
            suppression -> symbol state machine -> text

Batch:
    result = decode_samples(samples, sample_rate)
    result.text, result.tone_hz, result.unit_seconds

Streaming (producer pushes, consumer decodes whatever is held):
    dec = CWDecoder(sample_rate=8000, buffer_seconds=60)
    dec.feed(sample)             # or dec.feed_block(chunk)
    text = dec.decode().text     # decode(window=10.0) for the last 10 s

Every decode is a fresh pass over a snapshot; nothing carries over between
calls except the buffered audio, so decoding the same samples twice gives
the same text. Degenerate input (empty, silent, noise) decodes to an empty
or placeholder-laden string rather than raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from . import envelope as envelope_mod
from .config import DecoderConfig
from .sample_buffer import SampleBuffer
from .segmenter import Run, min_run_windows, segment, suppress_noise
from .symbols import SymbolDecoder
from .timing import calibrate
from .tone import estimate_tone
from .wavfile import read_wav

log = logging.getLogger(__name__)

DEFAULT_BUFFER_SECONDS = 60.0


@dataclass(frozen=True)
class DecodeResult:
    text:           str
    tone_hz:        Optional[float]   # None with the rms envelope and no fixed tone
    unit_windows:   int
    window_seconds: float
    threshold:      float
    runs:           Tuple[Run, ...] = field(default_factory=tuple)

    @property
    def unit_seconds(self) -> float:
        return self.unit_windows * self.window_seconds


def _sanitize(samples) -> np.ndarray:
    x = np.asarray(samples, dtype=np.float64).ravel()
    return np.nan_to_num(x, nan=0.0, posinf=0.0, neginf=0.0)


def _resolve_tone(x: np.ndarray, sample_rate: float, config: DecoderConfig) -> Optional[float]:
    if config.tone_hz is not None:
        return float(config.tone_hz)
    if config.envelope == "rms":
        return None
    max_samples = None
    if config.tone_scan_seconds is not None:
        max_samples = max(1, int(config.tone_scan_seconds * sample_rate))
    return estimate_tone(
        x, sample_rate,
        lo          = config.tone_min_hz,
        hi          = config.tone_max_hz,
        step        = config.tone_step_hz,
        max_samples = max_samples,
    )


def decode_samples(samples, sample_rate: float,
                   config: Optional[DecoderConfig] = None) -> DecodeResult:
    """Run the full pipeline over one array of samples."""
    config = config or DecoderConfig()
    x = _sanitize(samples)

    tone_hz = _resolve_tone(x, sample_rate, config)
    env = envelope_mod.extract(
        x, sample_rate,
        method         = config.envelope,
        tone_hz        = tone_hz,
        window_seconds = config.window_seconds,
        smooth_radius  = config.smooth_radius,
    )
    env = np.nan_to_num(env, nan=0.0, posinf=0.0, neginf=0.0)

    raw_runs = segment(env, config.threshold_ratio)
    if not raw_runs:
        log.debug("no keyed signal in %d windows", len(env))
        return DecodeResult("", tone_hz, 1, config.window_seconds, 0.0, ())

    thr = float(np.max(env)) * config.threshold_ratio

    unit = calibrate(
        raw_runs,
        min_length = config.min_keyed_windows,
        method     = config.unit_method,
        percentile = config.unit_percentile,
    )
    min_len = min_run_windows(unit, config.window_seconds, config.min_run_seconds)
    runs = suppress_noise(raw_runs, min_len)
    log.debug("%d runs (%d before suppression, min %d windows), unit %d windows",
              len(runs), len(raw_runs), min_len, unit)

    sym = SymbolDecoder(
        unit,
        dash_units     = config.dash_units,
        char_gap_units = config.char_gap_units,
        word_gap_units = config.word_gap_units,
        placeholder    = config.placeholder,
    )
    for run in runs:
        sym.push(run)
    text = sym.finish()

    return DecodeResult(text, tone_hz, unit, config.window_seconds, thr, tuple(runs))


class CWDecoder:
    """
    Decoder session bound to one sample rate. Owns the circular sample
    buffer that feed()/feed_block() fill; decode() works on a snapshot of it.
    """

    def __init__(
        self,
        sample_rate:    float,
        config:         Optional[DecoderConfig] = None,
        buffer_seconds: float = DEFAULT_BUFFER_SECONDS,
    ):
        self.sample_rate = float(sample_rate)
        self.config      = config or DecoderConfig()
        self.buffer      = SampleBuffer.for_duration(buffer_seconds, self.sample_rate)
        self._last: Optional[DecodeResult] = None

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def feed(self, sample: float) -> None:
        self.buffer.feed(sample)

    def feed_block(self, samples) -> None:
        self.buffer.feed_block(samples)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, window: Optional[float] = None) -> DecodeResult:
        """Decode the buffered audio, or only its most recent window seconds."""
        return self.decode_samples(self.buffer.snapshot(window))

    def decode_samples(self, samples) -> DecodeResult:
        self._last = decode_samples(samples, self.sample_rate, self.config)
        return self._last

    def decode_file(self, path: str) -> DecodeResult:
        """Batch decode a WAV file; its sample rate overrides the session's."""
        sample_rate, samples = read_wav(path)
        self._last = decode_samples(samples, sample_rate, self.config)
        return self._last

    # ------------------------------------------------------------------
    # Diagnostics from the most recent decode
    # ------------------------------------------------------------------

    @property
    def last_result(self) -> Optional[DecodeResult]:
        return self._last

    @property
    def tone_hz(self) -> Optional[float]:
        return self._last.tone_hz if self._last else None

    @property
    def unit_seconds(self) -> Optional[float]:
        return self._last.unit_seconds if self._last else None


def decode_file(path: str, config: Optional[DecoderConfig] = None) -> DecodeResult:
    sample_rate, samples = read_wav(path)
    return decode_samples(samples, sample_rate, config)


def runs_summary(runs: List[Run]) -> str:
    """Compact run listing for -v output, e.g. '+10 -10 +30 -30'."""
    return " ".join(f"{'+' if r.keyed else '-'}{r.length}" for r in runs)
