import pytest

from cwdecode.segmenter import Run
from cwdecode.timing import calibrate, keyed_lengths


def _sos_runs(u):
    dot, dash = Run(True, u), Run(True, 3 * u)
    el, ch = Run(False, u), Run(False, 3 * u)
    return [Run(False, 7 * u), dot, el, dot, el, dot, ch, dash, el, dash, el, dash, ch,
            dot, el, dot, el, dot, Run(False, 7 * u)]


def test_keyed_lengths_filters_and_sorts():
    runs = [Run(True, 9), Run(False, 50), Run(True, 1), Run(True, 4)]
    assert keyed_lengths(runs, 3) == [4, 9]


def test_calibrate_sos():
    assert calibrate(_sos_runs(6)) == 6
    assert calibrate(_sos_runs(10)) == 10


def test_short_blips_never_set_the_unit():
    runs = [Run(True, 1), Run(True, 2), Run(False, 5)] + _sos_runs(6)
    assert calibrate(runs) == 6


def test_percentile_vs_minimum():
    runs = [Run(True, n) for n in (5, 6, 7, 18, 18, 18)]
    assert calibrate(runs) == 7
    assert calibrate(runs, method="minimum") == 5


def test_fallback_unit():
    assert calibrate([]) == 1
    assert calibrate([Run(False, 100), Run(True, 2)]) == 1


def test_unknown_method():
    with pytest.raises(ValueError):
        calibrate(_sos_runs(6), method="median")
