"""
Synthetic Morse recordings for tests and the `cwdecode generate` command.

    key   = build_morse_key("CQ DE W2ASM", sample_rate=8000, wpm=12)
    audio = synthesize("CQ DE W2ASM", wpm=12, tone_hz=600, snr_db=10)

Timing is canonical PARIS timing: dot = 1 unit, dash = 3, element gap = 1,
letter gap = 3, word gap = 7, with unit = 1.2 / WPM seconds. Durations are
whole multiples of a unit rounded once to samples, so with no jitter every
element lands on the same sample grid.

SNR is tone RMS relative to noise RMS over the whole recording.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .symbols import encode

NOISE_RMS               = 0.08
PEAK_LIMIT              = 0.98
FADE_SECONDS            = 0.005   # linear on/off ramps
LEAD_IN_UNITS           = 7.0
INTER_MESSAGE_GAP_UNITS = 7.0


def dit_seconds(wpm: float) -> float:
    return 1.2 / wpm


def unit_samples(wpm: float, sample_rate: float) -> int:
    return max(1, int(round(dit_seconds(wpm) * sample_rate)))


def _segments(message: str, lead_in_units: float):
    """(length in units, keyed) for one pass of the message."""
    segments: list[tuple[float, bool]] = []
    if lead_in_units > 0:
        segments.append((lead_in_units, False))

    words = encode(message)
    for wi, word in enumerate(words):
        for ci, pattern in enumerate(word):
            for ei, elem in enumerate(pattern):
                segments.append((3.0 if elem == "-" else 1.0, True))
                if ei < len(pattern) - 1:
                    segments.append((1.0, False))
            if ci < len(word) - 1:
                segments.append((3.0, False))
        if wi < len(words) - 1:
            segments.append((7.0, False))

    segments.append((INTER_MESSAGE_GAP_UNITS, False))
    return segments


def build_morse_key(
    message:             str,
    sample_rate:         float,
    wpm:                 float,
    lead_in_units:       float = LEAD_IN_UNITS,
    timing_jitter_sigma: float = 0.0,
    rng:                 Optional[np.random.Generator] = None,
    fade_seconds:        float = FADE_SECONDS,
) -> np.ndarray:
    """On/off keying envelope in [0, 1], one sample per audio sample."""
    unit_n = unit_samples(wpm, sample_rate)

    lengths = []
    states = []
    for units, is_on in _segments(message, lead_in_units):
        seg = units * unit_n
        if timing_jitter_sigma > 0.0 and rng is not None:
            factor = float(rng.normal(1.0, timing_jitter_sigma))
            seg *= min(1.8, max(0.5, factor))
        lengths.append(max(1, int(round(seg))))
        states.append(is_on)

    key = np.repeat(np.array(states, dtype=np.float64), lengths)
    total = len(key)

    fade_n = max(1, int(fade_seconds * sample_rate))
    if fade_seconds > 0 and fade_n * 2 < total:
        window = np.ones(total, dtype=np.float64)
        ramp = np.linspace(0.0, 1.0, fade_n, endpoint=False)
        edges = np.diff(np.concatenate(([0.0], key, [0.0])))
        on_edges = np.where(edges == 1.0)[0]
        off_edges = np.where(edges == -1.0)[0]

        for start in on_edges:
            end = min(total, start + fade_n)
            window[start:end] *= ramp[: end - start]
        for stop in off_edges:
            start = max(0, stop - fade_n)
            tail = np.linspace(1.0, 0.0, stop - start, endpoint=False)
            window[start:stop] *= tail

        key *= window

    return key


def make_tone(key: np.ndarray, sample_rate: float, tone_hz: float,
              amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(len(key), dtype=np.float64) / sample_rate
    return amplitude * np.sin(2.0 * np.pi * tone_hz * t) * key


def add_noise(tone: np.ndarray, snr_db: float,
              rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Rescale tone against NOISE_RMS white noise to hit snr_db."""
    rng = rng if rng is not None else np.random.default_rng()
    tone_rms = float(np.sqrt(np.mean(tone * tone))) if len(tone) else 0.0
    if tone_rms <= 0:
        raise ValueError("tone RMS is zero; message produced no keyed symbols")

    noise = rng.normal(0.0, 1.0, len(tone))
    noise *= NOISE_RMS / float(np.sqrt(np.mean(noise * noise)))

    target_rms = NOISE_RMS * (10.0 ** (snr_db / 20.0))
    mix = noise + tone * (target_rms / tone_rms)
    peak = float(np.max(np.abs(mix)))
    if peak > PEAK_LIMIT:
        mix *= PEAK_LIMIT / peak
    return mix


def synthesize(
    message:     str,
    wpm:         float = 12.0,
    tone_hz:     float = 600.0,
    sample_rate: float = 8000,
    snr_db:      Optional[float] = None,
    seed:        Optional[int] = 48,
    amplitude:   float = 0.5,
    jitter:      float = 0.0,
) -> np.ndarray:
    """Keyed tone for message; clean unless snr_db is given."""
    rng = np.random.default_rng(seed)
    key = build_morse_key(message, sample_rate, wpm, timing_jitter_sigma=jitter, rng=rng)
    tone = make_tone(key, sample_rate, tone_hz, amplitude)
    if snr_db is None:
        return tone
    return add_noise(tone, snr_db, rng)


def sample_filename(message: str, wpm: float, tone_hz: float, snr_db: Optional[float]) -> str:
    """Harness naming: sample_<wpm>_<tone>_<snr>_<TEXT>.wav"""
    snr = "clean" if snr_db is None else f"{snr_db:.0f}"
    text = "_".join(message.upper().split())
    return f"sample_{wpm:.0f}_{tone_hz:.0f}_{snr}_{text}.wav"
