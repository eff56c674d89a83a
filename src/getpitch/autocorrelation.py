"""
Autocorrelation - biased short-term autocorrelation of a windowed frame.

    r[l] = (1/N) * sum_{n=0}^{N-l-1} x[n] * x[n+l]

The estimate is normalized by the full frame length N for every lag (no
end-effect correction) and evaluated directly, lag by lag.
"""

import numpy as np

# r[0] of a silent frame is replaced by this value so log10(r[0]) and
# r[l] / r[0] stay finite.
R0_FLOOR = 1e-10


def compute_autocorrelation(samples: np.ndarray, n_lags: int) -> np.ndarray:
    """
    Compute autocorrelation for lags 0 to n_lags - 1.

    Args:
        samples: Windowed samples
        n_lags: Number of lags to compute (at most len(samples))

    Returns:
        Array of n_lags autocorrelation values, with r[0] >= 1e-10
    """
    samples = np.asarray(samples, dtype=np.float64)
    n = len(samples)
    if n_lags > n:
        raise ValueError(f"Cannot compute {n_lags} lags from a frame of {n} samples")

    r = np.zeros(n_lags)

    for lag in range(n_lags):
        r[lag] = np.dot(samples[:n - lag], samples[lag:]) / n

    if n_lags > 0 and r[0] == 0.0:
        r[0] = R0_FLOOR

    return r
