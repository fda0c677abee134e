"""
Decoder configuration.

The module-level constants are the tuned defaults; DecoderConfig bundles
them so a decode pass can be re-run with different settings, and
load_config()/save_config() persist them as JSON:

    {
      "threshold_ratio": 0.3,
      "smooth_radius": 2,
      "tone_hz": 650
    }

Keys missing from a file are filled from DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

# Tone scan
TONE_MIN_HZ        = 300.0   # lowest candidate tone
TONE_MAX_HZ        = 1000.0  # highest candidate tone (inclusive)
TONE_STEP_HZ       = 10.0
DEFAULT_TONE_HZ    = 600.0   # reported when there is no energy in the band

# Envelope
WINDOW_SECONDS     = 0.010   # 10 ms analysis windows
SMOOTH_RADIUS      = 0       # ±windows of moving average; 0 = off
ENVELOPE_METHODS   = ("goertzel", "rms")

# Segmenter
THRESHOLD_RATIO    = 0.30    # keyed when envelope > ratio * peak
MIN_RUN_SECONDS    = 0.020   # noise floor for run suppression

# Timing
MIN_KEYED_WINDOWS  = 3       # keyed runs shorter than this never set the unit
UNIT_METHODS       = ("percentile", "minimum")
UNIT_PERCENTILE    = 1.0 / 3.0

# Symbol classification, in units
DASH_UNITS         = 2.0     # keyed >= 2u is a dash
CHAR_GAP_UNITS     = 3.0     # unkeyed >= 3u ends a character
WORD_GAP_UNITS     = 6.0     # unkeyed >= 6u ends a word
PLACEHOLDER        = "?"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class DecoderConfig:
    tone_min_hz:        float = TONE_MIN_HZ
    tone_max_hz:        float = TONE_MAX_HZ
    tone_step_hz:       float = TONE_STEP_HZ
    tone_hz:            Optional[float] = None    # fixed tone, skips the scan
    tone_scan_seconds:  Optional[float] = None    # scan only the most recent N s
    envelope:           str   = "goertzel"
    window_seconds:     float = WINDOW_SECONDS
    smooth_radius:      int   = SMOOTH_RADIUS
    threshold_ratio:    float = THRESHOLD_RATIO
    min_run_seconds:    float = MIN_RUN_SECONDS
    min_keyed_windows:  int   = MIN_KEYED_WINDOWS
    unit_method:        str   = "percentile"
    unit_percentile:    float = UNIT_PERCENTILE
    dash_units:         float = DASH_UNITS
    char_gap_units:     float = CHAR_GAP_UNITS
    word_gap_units:     float = WORD_GAP_UNITS
    placeholder:        str   = PLACEHOLDER

    def __post_init__(self):
        if not 0 < self.tone_min_hz <= self.tone_max_hz:
            raise ConfigError(
                f"tone range must satisfy 0 < min <= max, got "
                f"{self.tone_min_hz}..{self.tone_max_hz}")
        if self.tone_step_hz <= 0:
            raise ConfigError(f"tone_step_hz must be positive, got {self.tone_step_hz}")
        if self.tone_hz is not None and self.tone_hz <= 0:
            raise ConfigError(f"tone_hz must be positive, got {self.tone_hz}")
        if self.tone_scan_seconds is not None and self.tone_scan_seconds <= 0:
            raise ConfigError(f"tone_scan_seconds must be positive, got {self.tone_scan_seconds}")
        if self.envelope not in ENVELOPE_METHODS:
            raise ConfigError(
                f"envelope must be one of {', '.join(ENVELOPE_METHODS)}, got {self.envelope!r}")
        if self.window_seconds <= 0:
            raise ConfigError(f"window_seconds must be positive, got {self.window_seconds}")
        if not _is_int(self.smooth_radius) or self.smooth_radius < 0:
            raise ConfigError(f"smooth_radius must be an integer >= 0, got {self.smooth_radius!r}")
        if not 0.0 < self.threshold_ratio < 1.0:
            raise ConfigError(f"threshold_ratio must be in (0, 1), got {self.threshold_ratio}")
        if self.min_run_seconds < 0:
            raise ConfigError(f"min_run_seconds must be >= 0, got {self.min_run_seconds}")
        if not _is_int(self.min_keyed_windows) or self.min_keyed_windows < 1:
            raise ConfigError(f"min_keyed_windows must be an integer >= 1, got {self.min_keyed_windows!r}")
        if self.unit_method not in UNIT_METHODS:
            raise ConfigError(
                f"unit_method must be one of {', '.join(UNIT_METHODS)}, got {self.unit_method!r}")
        if not 0.0 <= self.unit_percentile < 1.0:
            raise ConfigError(f"unit_percentile must be in [0, 1), got {self.unit_percentile}")
        if self.dash_units <= 0:
            raise ConfigError(f"dash_units must be positive, got {self.dash_units}")
        if not 0 < self.char_gap_units <= self.word_gap_units:
            raise ConfigError("gap thresholds must satisfy 0 < char_gap_units <= word_gap_units")
        if len(self.placeholder) != 1:
            raise ConfigError(f"placeholder must be a single character, got {self.placeholder!r}")

    def replace(self, **overrides) -> "DecoderConfig":
        """Copy with the given fields changed; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_CONFIG = DecoderConfig().to_dict()


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def load_config(path: str) -> DecoderConfig:
    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}")
    try:
        with open(path) as f:
            cfg = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: not valid JSON ({e})") from e
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: expected a JSON object, got {type(cfg).__name__}")

    known = {f.name for f in fields(DecoderConfig)}
    unknown = sorted(set(cfg) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown config keys: {', '.join(unknown)}")

    # Fill in any missing keys from defaults
    merged = dict(DEFAULT_CONFIG)
    merged.update(cfg)
    try:
        return DecoderConfig(**merged)
    except TypeError as e:
        raise ConfigError(f"{path}: {e}") from e


def save_config(config: DecoderConfig, path: str) -> None:
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
