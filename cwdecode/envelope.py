"""
Envelope extraction: samples -> one value per fixed-length window.

Windows partition the input without gaps or overlap; a trailing partial
window is kept, so len(envelope) == ceil(len(samples) / window_length).

Two interchangeable strategies:
  goertzel  power at the estimated tone in each window
  rms       RMS amplitude of each window, independent of tone
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import WINDOW_SECONDS
from .tone import goertzel_power

log = logging.getLogger(__name__)


def window_length(sample_rate: float, window_seconds: float = WINDOW_SECONDS) -> int:
    return max(1, int(sample_rate * window_seconds))


def _split(samples: np.ndarray, size: int):
    """(full windows as 2-D array, trailing partial window)"""
    n_full = len(samples) // size
    full = samples[:n_full * size].reshape(n_full, size)
    tail = samples[n_full * size:]
    return full, tail


def goertzel_envelope(samples, sample_rate: float, tone_hz: float,
                      window_seconds: float = WINDOW_SECONDS) -> np.ndarray:
    x = np.asarray(samples, dtype=np.float64).ravel()
    size = window_length(sample_rate, window_seconds)
    full, tail = _split(x, size)

    out = np.empty(len(full) + (1 if len(tail) else 0), dtype=np.float64)
    if len(full):
        out[:len(full)] = goertzel_power(full, tone_hz, sample_rate)
    if len(tail):
        out[-1] = goertzel_power(tail, tone_hz, sample_rate)
    return out


def rms_envelope(samples, sample_rate: float,
                 window_seconds: float = WINDOW_SECONDS) -> np.ndarray:
    x = np.asarray(samples, dtype=np.float64).ravel()
    size = window_length(sample_rate, window_seconds)
    full, tail = _split(x, size)

    out = np.empty(len(full) + (1 if len(tail) else 0), dtype=np.float64)
    if len(full):
        out[:len(full)] = np.sqrt(np.mean(full * full, axis=1))
    if len(tail):
        out[-1] = np.sqrt(np.mean(tail * tail))
    return out


def smooth(envelope, radius: int) -> np.ndarray:
    """
    Centred moving average over +/- radius windows. Near the edges the
    average is taken over the windows that exist, so a single-window spike
    is spread rather than the ends being pulled toward zero.
    """
    env = np.asarray(envelope, dtype=np.float64)
    if radius <= 0 or len(env) == 0:
        return env.copy()
    n      = len(env)
    kernel = np.ones(2 * radius + 1)
    sums   = np.convolve(env, kernel)[radius:radius + n]
    counts = np.convolve(np.ones(n), kernel)[radius:radius + n]
    return sums / counts


def extract(
    samples,
    sample_rate:    float,
    method:         str   = "goertzel",
    tone_hz:        Optional[float] = None,
    window_seconds: float = WINDOW_SECONDS,
    smooth_radius:  int   = 0,
) -> np.ndarray:
    if method == "goertzel":
        if tone_hz is None:
            raise ValueError("goertzel envelope needs tone_hz")
        env = goertzel_envelope(samples, sample_rate, tone_hz, window_seconds)
    elif method == "rms":
        env = rms_envelope(samples, sample_rate, window_seconds)
    else:
        raise ValueError(f"unknown envelope method {method!r}")

    if smooth_radius:
        env = smooth(env, smooth_radius)
    log.debug("%s envelope: %d windows of %.1f ms", method, len(env), window_seconds * 1000)
    return env
