"""
Segmenter: envelope -> alternating keyed / unkeyed runs.

    segment()          threshold at a fraction of the peak, binarise,
                       run-length compress
    suppress_noise()   fold runs too short to be signal into their
                       neighbour, then re-merge same-state neighbours

Every function preserves the partition: run lengths always sum to the
number of envelope windows.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple

import numpy as np

from .config import MIN_RUN_SECONDS, THRESHOLD_RATIO


class Run(NamedTuple):
    keyed:  bool
    length: int    # envelope windows


def threshold(envelope, ratio: float = THRESHOLD_RATIO) -> float:
    env = np.asarray(envelope, dtype=np.float64)
    if len(env) == 0:
        return 0.0
    return float(np.max(env)) * ratio


def binarize(envelope, ratio: float = THRESHOLD_RATIO) -> np.ndarray:
    env = np.asarray(envelope, dtype=np.float64)
    return env > threshold(env, ratio)


def runs_from_binary(states: Iterable) -> List[Run]:
    """Convert a binary sequence to a run-length list."""
    states = [bool(s) for s in states]
    if not states:
        return []
    out: List[Run] = []
    cur = states[0]
    n = 1
    for v in states[1:]:
        if v == cur:
            n += 1
        else:
            out.append(Run(cur, n))
            cur = v
            n = 1
    out.append(Run(cur, n))
    return out


def segment(envelope, ratio: float = THRESHOLD_RATIO) -> List[Run]:
    """
    Raw runs of the envelope against ratio * peak. Empty, silent (peak 0)
    or non-finite envelopes give no runs.
    """
    env = np.asarray(envelope, dtype=np.float64)
    if len(env) == 0:
        return []
    peak = float(np.max(env))
    if not np.isfinite(peak) or peak <= 0.0:
        return []
    return runs_from_binary(env > peak * ratio)


def suppress_noise(runs: List[Run], min_length: int) -> List[Run]:
    """
    Merge runs shorter than min_length into the preceding run, keeping the
    preceding run's state. A short leading run has no predecessor and is
    carried into the first surviving run instead. Adjacent runs that end up
    with the same state are merged. If nothing survives, the whole span is
    one unkeyed run.
    """
    if not runs or min_length <= 1:
        return list(runs)

    cleaned: List[Run] = []
    carry = 0
    for keyed, length in runs:
        if length < min_length:
            if cleaned:
                prev = cleaned[-1]
                cleaned[-1] = Run(prev.keyed, prev.length + length)
            else:
                carry += length
            continue

        length += carry
        carry = 0
        if cleaned and cleaned[-1].keyed == keyed:
            cleaned[-1] = Run(keyed, cleaned[-1].length + length)
        else:
            cleaned.append(Run(keyed, length))

    if carry:
        return [Run(False, carry)]
    return cleaned


def min_run_windows(unit: int, window_seconds: float,
                    floor_seconds: float = MIN_RUN_SECONDS) -> int:
    """Shortest run kept as signal: half a unit, never below the fixed floor."""
    floor = int(round(floor_seconds / window_seconds)) if window_seconds > 0 else 0
    return max(1, unit // 2, floor)
