"""
Morse tables and the run -> text state machine.

SymbolDecoder consumes runs one at a time once the unit is known:

    keyed   <  dash_units * unit                 "."
    keyed   >= dash_units * unit                 "-"
    unkeyed <  char_gap_units * unit             intra-character, nothing
    unkeyed in [char_gap_units, word_gap_units)  flush the character
    unkeyed >= word_gap_units * unit             flush, then a space

States: IDLE (nothing pending) and ACCUMULATING (a symbol group is being
built). Unknown groups become the placeholder character.
"""

from __future__ import annotations

from enum import Enum, auto
from types import MappingProxyType
from typing import Iterable, List

from .config import CHAR_GAP_UNITS, DASH_UNITS, PLACEHOLDER, WORD_GAP_UNITS
from .segmenter import Run


# ---------------------------------------------------------------------------
# Morse tables
# ---------------------------------------------------------------------------

MORSE_REVERSE = MappingProxyType({
    ".-": "A", "-...": "B", "-.-.": "C", "-..": "D", ".": "E",
    "..-.": "F", "--.": "G", "....": "H", "..": "I", ".---": "J",
    "-.-": "K", ".-..": "L", "--": "M", "-.": "N", "---": "O",
    ".--.": "P", "--.-": "Q", ".-.": "R", "...": "S", "-": "T",
    "..-": "U", "...-": "V", ".--": "W", "-..-": "X", "-.--": "Y",
    "--..": "Z",
    "-----": "0", ".----": "1", "..---": "2", "...--": "3", "....-": "4",
    ".....": "5", "-....": "6", "--...": "7", "---..": "8", "----.": "9",
})

MORSE_MAP = MappingProxyType({v: k for k, v in MORSE_REVERSE.items()})


def lookup(group: str, placeholder: str = PLACEHOLDER) -> str:
    return MORSE_REVERSE.get(group, placeholder)


def encode(text: str) -> List[List[str]]:
    """Words of symbol groups, e.g. "SOS" -> [["...", "---", "..."]]."""
    words = []
    for word in text.upper().split():
        groups = [MORSE_MAP[ch] for ch in word if ch in MORSE_MAP]
        if groups:
            words.append(groups)
    return words


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class SymbolState(Enum):
    IDLE         = auto()
    ACCUMULATING = auto()


class SymbolDecoder:

    def __init__(
        self,
        unit:           int,
        dash_units:     float = DASH_UNITS,
        char_gap_units: float = CHAR_GAP_UNITS,
        word_gap_units: float = WORD_GAP_UNITS,
        placeholder:    str   = PLACEHOLDER,
    ):
        self.unit        = max(1, int(unit))
        self.placeholder = placeholder

        self._dash_len     = dash_units * self.unit
        self._char_gap_len = char_gap_units * self.unit
        self._word_gap_len = word_gap_units * self.unit

        self._symbol: str = ""
        self._out:    List[str] = []

    @property
    def state(self) -> SymbolState:
        return SymbolState.ACCUMULATING if self._symbol else SymbolState.IDLE

    @property
    def pending(self) -> str:
        return self._symbol

    def push(self, run: Run) -> None:
        keyed, length = run
        if keyed:
            self._symbol += "." if length < self._dash_len else "-"
        elif length >= self._word_gap_len:
            self._flush()
            self._out.append(" ")
        elif length >= self._char_gap_len:
            self._flush()

    def finish(self) -> str:
        self._flush()
        return "".join(self._out).strip()

    def _flush(self) -> None:
        if self._symbol:
            self._out.append(lookup(self._symbol, self.placeholder))
            self._symbol = ""


def decode_runs(runs: Iterable[Run], unit: int, **thresholds) -> str:
    dec = SymbolDecoder(unit, **thresholds)
    for run in runs:
        dec.push(run)
    return dec.finish()
