"""Tests for the biased autocorrelation."""

import numpy as np
import pytest

from getpitch import compute_autocorrelation
from getpitch.autocorrelation import R0_FLOOR


def _reference(x, n_lags):
    n = len(x)
    return [sum(x[i] * x[i + lag] for i in range(n - lag)) / n for lag in range(n_lags)]


class TestAutocorrelation:

    def test_matches_definition(self):
        x = np.random.default_rng(0).normal(size=64)
        r = compute_autocorrelation(x, 20)
        np.testing.assert_allclose(r, _reference(x, 20), rtol=1e-10, atol=1e-12)

    def test_normalized_by_frame_length(self):
        """Every lag is divided by N, not by N - lag."""
        r = compute_autocorrelation(np.ones(4), 4)
        np.testing.assert_allclose(r, [1.0, 0.75, 0.5, 0.25])

    def test_r0_is_mean_power(self):
        x = np.random.default_rng(1).uniform(-1, 1, size=200)
        r = compute_autocorrelation(x, 10)
        assert r[0] == pytest.approx(np.mean(x ** 2))
        assert r[0] >= 0.0

    def test_output_length(self):
        assert len(compute_autocorrelation(np.ones(100), 37)) == 37

    def test_silent_frame_floored(self):
        r = compute_autocorrelation(np.zeros(128), 16)
        assert r[0] == R0_FLOOR
        assert np.all(r[1:] == 0.0)

    def test_too_many_lags_raises(self):
        with pytest.raises(ValueError):
            compute_autocorrelation(np.ones(10), 11)
