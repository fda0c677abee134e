import numpy as np
import pytest

from cwdecode.segmenter import (
    Run,
    binarize,
    min_run_windows,
    runs_from_binary,
    segment,
    suppress_noise,
    threshold,
)


def test_threshold_and_binarize():
    env = np.array([0.0, 1.0, 0.2, 0.31, 0.3])
    assert threshold(env) == pytest.approx(0.3)
    np.testing.assert_array_equal(binarize(env), [False, True, False, True, False])


def test_runs_from_binary():
    assert runs_from_binary([]) == []
    assert runs_from_binary([1, 1, 0, 1]) == [Run(True, 2), Run(False, 1), Run(True, 1)]


def test_segment_alternates_and_partitions():
    env = np.array([0, 0, 5, 5, 5, 0, 4, 0, 0, 0], dtype=float)
    runs = segment(env)
    assert runs == [Run(False, 2), Run(True, 3), Run(False, 1), Run(True, 1), Run(False, 3)]
    assert sum(r.length for r in runs) == len(env)
    assert all(a.keyed != b.keyed for a, b in zip(runs, runs[1:]))


@pytest.mark.parametrize("env", [[], [0.0, 0.0, 0.0], [np.nan, 1.0], [np.inf, 1.0]])
def test_segment_degenerate(env):
    assert segment(np.array(env, dtype=float)) == []


def test_suppress_merges_short_run_into_predecessor():
    runs = [Run(False, 10), Run(True, 1), Run(False, 10), Run(True, 5)]
    assert suppress_noise(runs, 3) == [Run(False, 21), Run(True, 5)]


def test_suppress_short_dropout_inside_dash():
    runs = [Run(True, 8), Run(False, 1), Run(True, 9), Run(False, 6)]
    assert suppress_noise(runs, 3) == [Run(True, 18), Run(False, 6)]


def test_suppress_short_leading_run_carries_forward():
    runs = [Run(True, 1), Run(False, 10), Run(True, 5)]
    assert suppress_noise(runs, 3) == [Run(False, 11), Run(True, 5)]


def test_suppress_everything_short():
    runs = [Run(True, 1), Run(False, 2), Run(True, 2)]
    assert suppress_noise(runs, 3) == [Run(False, 5)]


def test_suppress_preserves_partition():
    rng = np.random.default_rng(7)
    runs = segment(rng.random(500))
    total = sum(r.length for r in runs)
    for min_len in (1, 2, 3, 5, 8):
        out = suppress_noise(runs, min_len)
        assert sum(r.length for r in out) == total
        assert all(a.keyed != b.keyed for a, b in zip(out, out[1:]))


def test_suppress_noop():
    runs = [Run(False, 1), Run(True, 1)]
    assert suppress_noise(runs, 1) == runs
    assert suppress_noise([], 3) == []


@pytest.mark.parametrize("unit, expected", [(1, 2), (4, 2), (6, 3), (10, 5)])
def test_min_run_windows(unit, expected):
    assert min_run_windows(unit, 0.01) == expected
