import numpy as np
import pytest

from cwdecode.envelope import extract, goertzel_envelope, rms_envelope, smooth, window_length


def test_window_length():
    assert window_length(8000, 0.01) == 80
    assert window_length(44100, 0.01) == 441
    assert window_length(50, 0.01) == 1


@pytest.mark.parametrize("n, expected", [(0, 0), (80, 1), (800, 10), (801, 11), (879, 11)])
def test_trailing_partial_window_is_kept(n, expected):
    x = np.ones(n)
    assert len(rms_envelope(x, 8000)) == expected
    assert len(goertzel_envelope(x, 8000, 600.0)) == expected


def test_rms_of_constant():
    env = rms_envelope(np.full(800, 0.25), 8000)
    np.testing.assert_allclose(env, 0.25)


def test_goertzel_envelope_follows_keying():
    sr = 8000
    t = np.arange(sr) / sr
    key = np.zeros(sr)
    key[2000:4000] = 1.0
    env = goertzel_envelope(np.sin(2 * np.pi * 600 * t) * key, sr, 600.0)
    assert np.all(env[:25] == 0.0)
    assert np.all(env[25:50] > 0.0)
    assert np.all(env[50:] == 0.0)


def test_smooth_radius_zero_is_copy():
    env = np.array([1.0, 2.0, 3.0])
    out = smooth(env, 0)
    np.testing.assert_array_equal(out, env)
    assert out is not env


def test_smooth_spreads_spike():
    out = smooth(np.array([0.0, 0.0, 3.0, 0.0, 0.0]), 1)
    np.testing.assert_allclose(out, [0.0, 1.0, 1.0, 1.0, 0.0])


def test_smooth_edges_average_existing_windows():
    out = smooth(np.array([3.0, 0.0, 0.0]), 1)
    assert out[0] == pytest.approx(1.5)


def test_smooth_kernel_longer_than_envelope():
    out = smooth(np.array([1.0, 3.0]), 5)
    np.testing.assert_allclose(out, [2.0, 2.0])


def test_extract_errors():
    x = np.ones(160)
    with pytest.raises(ValueError):
        extract(x, 8000, method="fft", tone_hz=600.0)
    with pytest.raises(ValueError):
        extract(x, 8000, method="goertzel", tone_hz=None)


def test_extract_rms_ignores_tone():
    x = np.ones(160)
    np.testing.assert_allclose(extract(x, 8000, method="rms"), [1.0, 1.0])
