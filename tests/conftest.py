"""Shared fixtures for getpitch tests."""

import numpy as np
import pytest


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run in an empty directory with no config file reachable."""
    monkeypatch.delenv("GETPITCH_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def sine(f0, sample_rate, n_samples, amplitude=0.5, phase=0.0):
    """Sinusoid of n_samples samples."""
    t = np.arange(n_samples) / sample_rate
    return amplitude * np.sin(2 * np.pi * f0 * t + phase)


def harmonic_tone(f0, sample_rate, n_samples, n_harmonics=5, amplitude=0.5):
    """Sum of harmonics with 1/k amplitudes."""
    t = np.arange(n_samples) / sample_rate
    x = np.zeros(n_samples)
    for k in range(1, n_harmonics + 1):
        x += np.sin(2 * np.pi * k * f0 * t) / k
    return amplitude * x / np.max(np.abs(x))
