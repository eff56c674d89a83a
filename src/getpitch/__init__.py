"""
getpitch - Autocorrelation pitch estimation and voicing detection.

Each fixed-length frame is windowed (rectangular or Hamming), its biased
autocorrelation is computed up to the longest admissible pitch period, the
second autocorrelation peak gives the pitch lag, and a threshold rule on
log power and normalized correlations decides voiced vs. unvoiced.

Usage:
    from getpitch import PitchAnalyzer

    analyzer = PitchAnalyzer(frame_len=480, sampling_freq=16000,
                             window="hamming", min_f0=50, max_f0=500)
    f0 = analyzer.compute_pitch(frame)   # Hz, 0 if unvoiced, -1 if bad length

    # Whole signals
    from getpitch import Sound
    pitch = Sound(samples, sample_rate=16000).to_pitch(frame_len=480)

Configuration (in order of precedence):
    1. Keyword arguments
    2. Config file: GETPITCH_CONFIG, ./getpitch.toml or ~/.getpitch/config.toml
    3. Built-in defaults
"""

import logging

from .autocorrelation import compute_autocorrelation
from .config import AnalyzerConfig, Thresholds, load_config
from .errors import ConfigurationError
from .pitch import (
    INVALID_PITCH,
    Pitch,
    PitchAnalyzer,
    PitchFrame,
    find_pitch_lag,
    is_unvoiced,
    lag_range,
)
from .sound import Sound
from .window import HAMMING, RECTANGULAR, make_window

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "PitchAnalyzer",
    "PitchFrame",
    "Pitch",
    "Sound",
    "AnalyzerConfig",
    "Thresholds",
    "load_config",
    "ConfigurationError",
    "make_window",
    "compute_autocorrelation",
    "lag_range",
    "find_pitch_lag",
    "is_unvoiced",
    "INVALID_PITCH",
    "HAMMING",
    "RECTANGULAR",
]
