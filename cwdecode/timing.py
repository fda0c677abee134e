"""
Timing calibration: the dot length ("unit") from the keyed runs.

Dashes are ~3 units and gaps are unkeyed, so the short end of the keyed
run population is the dots. The default takes the value one third of the
way up the sorted lengths: less fragile than the minimum (a single stray
blip that survives the floor) and not dragged up by dashes like the mean.
"""

from __future__ import annotations

import logging
from typing import List

from .config import MIN_KEYED_WINDOWS, UNIT_PERCENTILE
from .segmenter import Run

log = logging.getLogger(__name__)


def keyed_lengths(runs: List[Run], min_length: int = MIN_KEYED_WINDOWS) -> List[int]:
    return sorted(r.length for r in runs if r.keyed and r.length >= min_length)


def calibrate(
    runs:       List[Run],
    min_length: int   = MIN_KEYED_WINDOWS,
    method:     str   = "percentile",
    percentile: float = UNIT_PERCENTILE,
) -> int:
    """Unit in windows. Falls back to 1 when no keyed run qualifies."""
    if method not in ("percentile", "minimum"):
        raise ValueError(f"unknown unit method {method!r}")

    lengths = keyed_lengths(runs, min_length)
    if not lengths:
        log.debug("no keyed runs >= %d windows, unit falls back to 1", min_length)
        return 1

    if method == "minimum":
        unit = lengths[0]
    else:
        idx  = min(len(lengths) - 1, int(len(lengths) * percentile + 1e-9))
        unit = lengths[idx]
    log.debug("unit %d windows from %d keyed runs (%s)", unit, len(lengths), method)
    return unit
