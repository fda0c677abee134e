"""
Tone estimation with the Goertzel single-bin detector.

goertzel_power() runs the second-order resonator

    s[n] = x[n] + coeff * s[n-1] - s[n-2],   coeff = 2 cos(2 pi f / fs)

through scipy.signal.lfilter and returns

    power = s[N-1]^2 + s[N-2]^2 - coeff * s[N-1] * s[N-2]

along the last axis, so one call covers either a single block or a stack
of equal-length windows (see envelope.goertzel_envelope).

estimate_tone() scans a fixed grid (300-1000 Hz in 10 Hz steps by default)
and returns the strongest frequency. It is the dominant cost of a decode:
one pass over the samples per candidate. Streaming callers should bound it
with max_samples or pin the tone with DecoderConfig.tone_hz.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from scipy.signal import lfilter

from .config import DEFAULT_TONE_HZ, TONE_MAX_HZ, TONE_MIN_HZ, TONE_STEP_HZ

log = logging.getLogger(__name__)


def goertzel_power(samples, frequency: float, sample_rate: float):
    """Goertzel power at frequency. Scalar for 1-D input, array for 2-D."""
    x = np.asarray(samples, dtype=np.float64)
    n = x.shape[-1] if x.ndim else 0
    if n == 0:
        return np.zeros(x.shape[:-1]) if x.ndim > 1 else 0.0

    coeff = 2.0 * math.cos(2.0 * math.pi * frequency / sample_rate)
    s = lfilter([1.0], [1.0, -coeff, 1.0], x, axis=-1)
    s1 = s[..., -1]
    s2 = s[..., -2] if n > 1 else np.zeros_like(s1)
    power = s1 * s1 + s2 * s2 - coeff * s1 * s2
    if x.ndim == 1:
        return float(power)
    return power


def scan_frequencies(lo: float = TONE_MIN_HZ, hi: float = TONE_MAX_HZ,
                     step: float = TONE_STEP_HZ) -> np.ndarray:
    """Inclusive, ascending grid of candidate tones."""
    count = int(math.floor((hi - lo) / step + 1e-9)) + 1
    return lo + step * np.arange(max(1, count), dtype=np.float64)


def estimate_tone(
    samples,
    sample_rate: float,
    lo:          float = TONE_MIN_HZ,
    hi:          float = TONE_MAX_HZ,
    step:        float = TONE_STEP_HZ,
    max_samples: Optional[int] = None,
) -> float:
    """
    Frequency with the highest Goertzel power over the scan grid.
    Ties go to the lowest frequency. With no usable input (empty, or no
    energy anywhere in the band) returns DEFAULT_TONE_HZ.
    """
    x = np.asarray(samples, dtype=np.float64).ravel()
    if max_samples is not None and len(x) > max_samples:
        x = x[-max_samples:]
    if len(x) == 0:
        return DEFAULT_TONE_HZ

    freqs  = scan_frequencies(lo, hi, step)
    powers = np.array([goertzel_power(x, f, sample_rate) for f in freqs])
    powers = np.nan_to_num(powers, nan=0.0, posinf=0.0, neginf=0.0)

    best = int(np.argmax(powers))   # first maximum in ascending order
    if powers[best] <= 0.0:
        log.debug("no tone energy in %.0f-%.0f Hz, using %.0f Hz", lo, hi, DEFAULT_TONE_HZ)
        return DEFAULT_TONE_HZ

    log.debug("tone estimate %.0f Hz over %d samples", freqs[best], len(x))
    return float(freqs[best])
