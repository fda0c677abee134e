"""
Batch decoder harness.

Decodes every WAV file under a directory whose name carries the expected
text, and reports a score per file plus a summary by WPM:

    sample_<wpm>_<tone>_<snr>_<TEXT_WITH_UNDERSCORES>.wav
    sample_12_600_10_CQ_CQ_CQ_DE_W2ASM_K.wav

Files that do not follow the naming are decoded but not scored.

Usage:
    cwdecode harness recordings/
    cwdecode harness recordings/ --pattern "**/sample_12_*.wav"
"""

from __future__ import annotations

import glob
import os
import re
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import DecoderConfig
from .decoder import decode_file
from .errors import CWDecodeError

NAME_RE = re.compile(r"sample_(\d+)_(\d+)_([^_]+)_(.+)\.wav$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class Result:
    path:      str
    true_wpm:  Optional[int]
    true_tone: Optional[float]
    snr:       str
    expected:  Optional[str]
    decoded:   str
    tone_hz:   Optional[float]
    unit_ms:   float
    score_pct: float               # nan when there is nothing to score against
    error:     Optional[str] = None

    @property
    def exact(self) -> bool:
        return self.expected is not None and self.decoded == self.expected


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def score_against_known(decoded: str, known: str) -> float:
    """
    Cyclic phase-robust scoring.
    Splits decoded into blocks of len(known), finds best cyclic phase for each,
    returns weighted match percentage.
    """
    d = (decoded or "").strip().upper()
    k = (known  or "").strip().upper()
    if not d or not k:
        return 0.0
    klen = len(k)
    blocks = [d[i:i + klen] for i in range(0, len(d), klen)]
    wm = wt = 0
    for blk in blocks:
        n = len(blk)
        best = max(
            sum(1 for a, b in zip(blk, (k[p:] + k[:p])[:n]) if a == b)
            for p in range(klen)
        )
        wm += best
        wt += n
    # missing characters count against the score
    wt = max(wt, klen)
    return 100.0 * wm / wt if wt else 0.0


# ---------------------------------------------------------------------------
# Filename parsing
# ---------------------------------------------------------------------------

def parse_name(path: str):
    """(wpm, tone_hz, snr, text) from a harness file name, or None."""
    m = NAME_RE.search(os.path.basename(path))
    if not m:
        return None
    text = " ".join(m.group(4).upper().split("_"))
    return int(m.group(1)), float(m.group(2)), m.group(3), text


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

def run_file(path: str, config: Optional[DecoderConfig] = None) -> Result:
    parsed = parse_name(path)
    wpm, tone, snr, expected = parsed if parsed else (None, None, "?", None)

    try:
        res = decode_file(path, config)
    except CWDecodeError as e:
        return Result(path, wpm, tone, snr, expected, "", None, 0.0, float("nan"), str(e))

    score = score_against_known(res.text, expected) if expected else float("nan")
    return Result(
        path      = path,
        true_wpm  = wpm,
        true_tone = tone,
        snr       = snr,
        expected  = expected,
        decoded   = res.text,
        tone_hz   = res.tone_hz,
        unit_ms   = res.unit_seconds * 1000.0,
        score_pct = score,
    )


def find_files(directory: str, pattern: str = "**/*.wav") -> List[str]:
    return sorted(glob.glob(os.path.join(directory, pattern), recursive=True))


def run_directory(directory: str, pattern: str = "**/*.wav",
                  config: Optional[DecoderConfig] = None) -> List[Result]:
    return [run_file(p, config) for p in find_files(directory, pattern)]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def format_table(results: List[Result]) -> str:
    lines = [f"{'WPM':>4}  {'Tone':>5}  {'Est':>5}  {'Unit':>6}  {'SNR':>5}  {'Score%':>7}  Decoded",
             "-" * 90]
    for r in results:
        wpm   = f"{r.true_wpm:>4}" if r.true_wpm is not None else "   ?"
        tone  = f"{r.true_tone:>5.0f}" if r.true_tone is not None else "    ?"
        est   = f"{r.tone_hz:>5.0f}" if r.tone_hz is not None else "    -"
        score = f"{r.score_pct:7.1f}" if np.isfinite(r.score_pct) else "    n/a"
        shown = f"ERROR {r.error}" if r.error else r.decoded[:50]
        lines.append(f"{wpm}  {tone}  {est}  {r.unit_ms:5.0f}ms  {r.snr:>5}  {score}  {shown}")
    return "\n".join(lines)


def format_summary(results: List[Result]) -> str:
    def stats(sub: List[Result]) -> str:
        scores = [r.score_pct for r in sub if np.isfinite(r.score_pct)]
        mean_sc = np.mean(scores) if scores else float("nan")
        exact   = sum(1 for r in sub if r.exact)
        errors  = sum(1 for r in sub if r.error)
        return f"files={len(sub):3d}  exact={exact:3d}  score={mean_sc:5.1f}%  errors={errors}"

    lines = ["By WPM:"]
    for w in sorted({r.true_wpm for r in results if r.true_wpm is not None}):
        lines.append(f"  {w:>3} wpm: {stats([r for r in results if r.true_wpm == w])}")
    lines.append("Overall:")
    lines.append(f"  {stats(results)}")
    return "\n".join(lines)
