"""
Pitch - frame-level F0 estimation by time-domain autocorrelation.

Per frame:
    raw samples -> windowed samples -> autocorrelation r[0..lag_max-1]
    -> pitch lag search + features -> voicing decision -> F0 in Hz or 0

Features used by the voicing rule:
    pot      = 10 * log10(r[0])      frame log power in dB
    r1norm   = r[1] / r[0]           normalized correlation at lag 1
    rmaxnorm = r[lag] / r[0]         normalized correlation at the pitch lag

The lag range is derived from the F0 search interval:
    lag_min = max(2, floor(fs / max_f0))
    lag_max = min(frame_len // 2, 1 + floor(fs / min_f0))
so every frame holds at least two periods of the lowest admissible F0.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .autocorrelation import compute_autocorrelation
from .config import AnalyzerConfig, Thresholds
from .errors import ConfigurationError
from .window import HAMMING, make_window, normalize_window_kind

logger = logging.getLogger(__name__)

# Returned by compute_pitch() when the frame length does not match.
INVALID_PITCH = -1.0

# Joint rule: frames weakly correlated both at lag 1 and at the pitch lag
# are unvoiced even if they pass the individual thresholds.
JOINT_R1NORM = 0.935
JOINT_RMAXNORM = 0.4


@dataclass
class PitchFrame:
    """Pitch analysis results for a single frame."""
    time: float      # Time in seconds (frame center)
    f0: float        # Hz (0 = unvoiced)
    lag: int         # Candidate pitch lag in samples (0 = no candidate)
    pot: float       # dB
    r1norm: float
    rmaxnorm: float

    @property
    def voiced(self) -> bool:
        """Whether this frame is voiced."""
        return self.f0 > 0.0


def lag_range(sampling_freq: float, min_f0: float, max_f0: float,
              frame_len: int) -> Tuple[int, int]:
    """
    Convert an F0 search interval to a lag search interval [lag_min, lag_max).

    Args:
        sampling_freq: Sampling frequency in Hz
        min_f0: Lowest admissible F0 in Hz
        max_f0: Highest admissible F0 in Hz
        frame_len: Samples per frame

    Returns:
        (lag_min, lag_max) tuple

    Raises:
        ConfigurationError: If the inputs are not positive, min_f0 >= max_f0,
            or the resulting range is empty
    """
    if sampling_freq <= 0 or frame_len <= 0:
        raise ConfigurationError(
            f"sampling_freq and frame_len must be positive, got {sampling_freq}, {frame_len}"
        )
    if min_f0 <= 0 or min_f0 >= max_f0:
        raise ConfigurationError(f"Invalid F0 range: [{min_f0}, {max_f0}]")

    fs = int(sampling_freq)
    lag_min = max(2, int(np.floor(fs / max_f0)))
    lag_max = min(frame_len // 2, 1 + int(np.floor(fs / min_f0)))

    if lag_min >= lag_max:
        raise ConfigurationError(
            f"Empty lag range [{lag_min}, {lag_max}) for F0 range [{min_f0}, {max_f0}] Hz, "
            f"sampling_freq={sampling_freq} Hz, frame_len={frame_len}"
        )
    return lag_min, lag_max


def find_pitch_lag(r: np.ndarray, lag_min: int, lag_max: int) -> Optional[int]:
    """
    Find the lag of the second autocorrelation peak (the pitch period).

    The scan first walks down the shoulder of the zero-lag peak: it moves on
    while the sequence is still decreasing, the position is below lag_min,
    or the value is still positive. From there it keeps the highest strict
    local maximum below lag_max. If no later position is a strict local
    maximum higher than the starting point, the starting lag is returned.
    If the shoulder runs to the end of the range there is no candidate:
    the last lag would be the tail of a ridge, not a peak.

    Args:
        r: Autocorrelation values, at least lag_max long
        lag_min: Minimum lag (1/max_f0 in samples)
        lag_max: Exclusive maximum lag

    Returns:
        Candidate pitch lag in samples, or None if the scan never leaves
        the zero-lag shoulder
    """
    n = min(lag_max, len(r))

    i = 1
    while i + 1 < n and (r[i] > r[i + 1] or i < lag_min or r[i] > 0.0):
        i += 1
    if i + 1 >= n:
        return None

    best = i
    while i < n:
        if r[i] > r[best]:
            if r[i] > r[i - 1] and i + 1 < len(r) and r[i] > r[i + 1]:
                best = i
        i += 1

    return best


def is_unvoiced(pot: float, r1norm: float, rmaxnorm: float,
                thresholds: Optional[Thresholds] = None) -> bool:
    """
    Voicing decision.

    A frame is unvoiced when any single feature is below its threshold, or
    when r1norm < 0.935 and rmaxnorm < 0.4 at the same time.
    """
    th = thresholds or Thresholds()
    return (pot < th.pot
            or r1norm < th.r1norm
            or rmaxnorm < th.rmaxnorm
            or (r1norm < JOINT_R1NORM and rmaxnorm < JOINT_RMAXNORM))


class PitchAnalyzer:
    """
    Autocorrelation pitch analyzer for fixed-length frames.

    Configuration is fixed at construction and changes only through
    set_window() and set_f0_range(). Analysis never modifies the
    configuration, so one instance can process any number of frames;
    reconfiguration must not run concurrently with analysis.

    Attributes:
        frame_len: Samples per frame
        sampling_freq: Sampling frequency in Hz
        window_kind: "hamming" or "rectangular"
        window: Window coefficients (frame_len values)
        lag_min, lag_max: Lag search interval [lag_min, lag_max)
        thresholds: Voicing thresholds
    """

    def __init__(
        self,
        frame_len: int,
        sampling_freq: float,
        window: str = HAMMING,
        min_f0: float = 50.0,
        max_f0: float = 500.0,
        thresholds: Optional[Thresholds] = None
    ):
        """
        Create a PitchAnalyzer.

        Raises:
            ConfigurationError: If any parameter is unusable
        """
        config = AnalyzerConfig(
            frame_len=frame_len,
            sampling_freq=float(sampling_freq),
            window=window,
            min_f0=min_f0,
            max_f0=max_f0,
            thresholds=thresholds or Thresholds(),
        )
        self._frame_len = config.frame_len
        self._sampling_freq = config.sampling_freq
        self._thresholds = config.thresholds
        self._window_kind = None
        self._window = None
        self._min_f0 = None
        self._max_f0 = None
        self._lag_min = None
        self._lag_max = None

        self.set_window(config.window)
        self.set_f0_range(config.min_f0, config.max_f0)

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "PitchAnalyzer":
        """Create an analyzer from an AnalyzerConfig."""
        return cls(
            frame_len=config.frame_len,
            sampling_freq=config.sampling_freq,
            window=config.window,
            min_f0=config.min_f0,
            max_f0=config.max_f0,
            thresholds=config.thresholds,
        )

    @property
    def frame_len(self) -> int:
        return self._frame_len

    @property
    def sampling_freq(self) -> float:
        return self._sampling_freq

    @property
    def window_kind(self) -> str:
        return self._window_kind

    @property
    def window(self) -> np.ndarray:
        return self._window

    @property
    def min_f0(self) -> float:
        return self._min_f0

    @property
    def max_f0(self) -> float:
        return self._max_f0

    @property
    def lag_min(self) -> int:
        return self._lag_min

    @property
    def lag_max(self) -> int:
        return self._lag_max

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds

    @property
    def config(self) -> AnalyzerConfig:
        """Current configuration as an AnalyzerConfig."""
        return AnalyzerConfig(
            frame_len=self._frame_len,
            sampling_freq=self._sampling_freq,
            window=self._window_kind,
            min_f0=self._min_f0,
            max_f0=self._max_f0,
            thresholds=self._thresholds,
        )

    def set_window(self, kind: str) -> None:
        """
        Select the window function and recompute its coefficients.

        Raises:
            ConfigurationError: If the kind is unknown or unusable for the
                frame length. The current window is kept in that case.
        """
        kind = normalize_window_kind(kind)
        window = make_window(self._frame_len, kind)
        window.setflags(write=False)
        self._window_kind = kind
        self._window = window
        logger.debug("Window set to %s (%d samples)", kind, self._frame_len)

    def set_f0_range(self, min_f0: float, max_f0: float) -> None:
        """
        Set the F0 search interval and recompute the lag range.

        Raises:
            ConfigurationError: If the range is invalid or maps to an empty
                lag interval. The current range is kept in that case.
        """
        lag_min, lag_max = lag_range(self._sampling_freq, min_f0, max_f0, self._frame_len)
        self._min_f0 = float(min_f0)
        self._max_f0 = float(max_f0)
        self._lag_min = lag_min
        self._lag_max = lag_max
        logger.debug("F0 range set to [%g, %g] Hz, lags [%d, %d)",
                     min_f0, max_f0, lag_min, lag_max)

    def analyze(self, frame, time: float = 0.0) -> Optional[PitchFrame]:
        """
        Analyze one frame and return all features.

        The input frame is not modified: windowing produces a new array.

        Args:
            frame: frame_len samples
            time: Time stamp stored in the result

        Returns:
            PitchFrame, or None if the frame is not 1-D with frame_len samples
        """
        x = np.asarray(frame, dtype=np.float64)
        if x.ndim != 1 or len(x) != self._frame_len:
            return None

        windowed = x * self._window
        r = compute_autocorrelation(windowed, self._lag_max)
        lag = find_pitch_lag(r, self._lag_min, self._lag_max)

        pot = 10.0 * np.log10(r[0])
        r1norm = r[1] / r[0]
        if lag is None:
            # no second peak in range, e.g. DC offset
            lag = 0
            rmaxnorm = 0.0
        else:
            rmaxnorm = r[lag] / r[0]

        logger.debug("pot=%.3f r1norm=%.3f rmaxnorm=%.3f lag=%d",
                     pot, r1norm, rmaxnorm, lag)

        if lag == 0 or is_unvoiced(pot, r1norm, rmaxnorm, self._thresholds):
            f0 = 0.0
        else:
            f0 = self._sampling_freq / lag

        return PitchFrame(float(time), float(f0), int(lag),
                          float(pot), float(r1norm), float(rmaxnorm))

    def compute_pitch(self, frame) -> float:
        """
        Estimate the F0 of one frame.

        Args:
            frame: frame_len samples

        Returns:
            F0 in Hz, 0.0 if unvoiced, or INVALID_PITCH (-1.0) if the frame
            length does not match frame_len
        """
        result = self.analyze(frame)
        if result is None:
            return INVALID_PITCH
        return result.f0

    def __repr__(self) -> str:
        return (f"PitchAnalyzer(frame_len={self._frame_len}, "
                f"sampling_freq={self._sampling_freq:g}, window={self._window_kind!r}, "
                f"f0_range=[{self._min_f0:g}, {self._max_f0:g}])")


class Pitch:
    """
    Pitch (F0) contour: one PitchFrame per analyzed frame.

    Attributes:
        frames: List of PitchFrame objects
        time_step: Time step between frames
        min_f0: Minimum pitch in Hz
        max_f0: Maximum pitch in Hz
    """

    def __init__(
        self,
        frames: List[PitchFrame],
        time_step: float,
        min_f0: float,
        max_f0: float
    ):
        self._frames = frames
        self._time_step = time_step
        self._min_f0 = min_f0
        self._max_f0 = max_f0

    @property
    def frames(self) -> List[PitchFrame]:
        """List of pitch frames."""
        return self._frames

    @property
    def n_frames(self) -> int:
        """Number of frames."""
        return len(self._frames)

    @property
    def time_step(self) -> float:
        """Time step between frames."""
        return self._time_step

    @property
    def min_f0(self) -> float:
        return self._min_f0

    @property
    def max_f0(self) -> float:
        return self._max_f0

    def times(self) -> np.ndarray:
        """Get array of frame times."""
        return np.array([f.time for f in self._frames])

    def values(self) -> np.ndarray:
        """Get array of pitch values (0 for unvoiced)."""
        return np.array([f.f0 for f in self._frames])

    def lags(self) -> np.ndarray:
        return np.array([f.lag for f in self._frames], dtype=int)

    def pots(self) -> np.ndarray:
        return np.array([f.pot for f in self._frames])

    def voiced(self) -> np.ndarray:
        """Boolean voicing mask."""
        return np.array([f.voiced for f in self._frames], dtype=bool)

    def get_value_at_time(self, time: float, interpolation: str = "linear") -> Optional[float]:
        """
        F0 in Hz at a given time.

        Returns None outside the analyzed span or when the frame closest to
        `time` is unvoiced. With "linear", F0 is interpolated between the two
        surrounding frames if both are voiced, otherwise the closest frame's
        value is returned.
        """
        if interpolation not in ("linear", "nearest"):
            raise ValueError(f"Unknown interpolation method: {interpolation}")
        if self.n_frames == 0:
            return None

        times = self.times()
        half_step = 0.5 * self._time_step
        if time < times[0] - half_step or time > times[-1] + half_step:
            return None

        f0 = self.values()
        voiced = self.voiced()
        pos = np.interp(time, times, np.arange(self.n_frames))
        nearest = int(round(pos))
        if not voiced[nearest]:
            return None

        lo = int(np.floor(pos))
        hi = min(lo + 1, self.n_frames - 1)
        if interpolation == "nearest" or not (voiced[lo] and voiced[hi]):
            return float(f0[nearest])
        return float(np.interp(time, times[lo:hi + 1], f0[lo:hi + 1]))

    def __repr__(self) -> str:
        return f"Pitch({self.n_frames} frames, {int(self.voiced().sum())} voiced)"
