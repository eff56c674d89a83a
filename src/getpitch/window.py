"""
Window functions applied to a frame before autocorrelation.

Two kinds are supported:
  - rectangular: every coefficient is 1
  - hamming:     w[n] = a0 - a1 * cos(2*pi*n / (N - 1))

The Hamming coefficients are the "optimal" equiripple values
(a0 = 0.53836, a1 = 0.46164) rather than the classic 0.54 / 0.46.
"""

import numpy as np

from .errors import ConfigurationError

RECTANGULAR = "rectangular"
HAMMING = "hamming"

HAMMING_A0 = 0.53836
HAMMING_A1 = 0.46164

_ALIASES = {
    "rect": RECTANGULAR,
    "rectangular": RECTANGULAR,
    "hamming": HAMMING,
}


def normalize_window_kind(kind: str) -> str:
    """Map a window name (case-insensitive, "rect" allowed) to its canonical form."""
    if not isinstance(kind, str):
        raise ConfigurationError(f"Window kind must be a string, got {kind!r}")
    canonical = _ALIASES.get(kind.lower().strip())
    if canonical is None:
        raise ConfigurationError(
            f"Unknown window kind: {kind!r} (expected 'rectangular' or 'hamming')"
        )
    return canonical


def rectangular_window(n: int) -> np.ndarray:
    """Generate rectangular window."""
    return np.ones(n)


def hamming_window(n: int) -> np.ndarray:
    """Generate Hamming window."""
    if n < 2:
        raise ConfigurationError(f"Hamming window needs at least 2 samples, got {n}")
    i = np.arange(n)
    return HAMMING_A0 - HAMMING_A1 * np.cos(2 * np.pi * i / (n - 1))


def make_window(frame_len: int, kind: str = HAMMING) -> np.ndarray:
    """
    Generate the weighting sequence for a frame.

    Args:
        frame_len: Number of samples per frame (> 0)
        kind: "rectangular" or "hamming"

    Returns:
        Array of frame_len coefficients

    Raises:
        ConfigurationError: If frame_len is not positive, the kind is
            unknown, or a Hamming window is requested with frame_len < 2
    """
    if frame_len <= 0:
        raise ConfigurationError(f"Frame length must be positive, got {frame_len}")

    kind = normalize_window_kind(kind)
    if kind == HAMMING:
        return hamming_window(frame_len)
    return rectangular_window(frame_len)
