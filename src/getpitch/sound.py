"""
Sound - mono samples with sample rate, cut into fixed-length frames.

A Sound holds samples that were decoded elsewhere; no file I/O happens here.
to_pitch() walks the signal frame by frame and runs a PitchAnalyzer on each
full frame.

Usage:
    import numpy as np
    from getpitch import Sound

    t = np.arange(16000) / 16000
    sound = Sound(0.5 * np.sin(2 * np.pi * 200 * t), sample_rate=16000)
    pitch = sound.to_pitch(frame_len=480, min_f0=70, max_f0=400)
    print(pitch.values())
"""

from typing import Iterator, Optional, Tuple

import numpy as np

from .config import load_config
from .errors import ConfigurationError
from .pitch import Pitch, PitchAnalyzer


class Sound:
    """
    Represents audio samples with sample rate.

    Attributes:
        samples: 1D numpy array of audio samples (mono only)
        sample_rate: Sample rate in Hz
    """

    def __init__(self, samples: np.ndarray, sample_rate: float):
        """
        Create a Sound from samples and sample rate.

        Raises:
            ValueError: If samples is not 1D (mono only supported) or the
                sample rate is not positive
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError("Only mono audio supported. Got shape: {}".format(samples.shape))
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        self._samples = samples
        self._sample_rate = float(sample_rate)

    @property
    def samples(self) -> np.ndarray:
        """Audio samples as 1D numpy array."""
        return self._samples

    @property
    def sample_rate(self) -> float:
        """Sample rate in Hz."""
        return self._sample_rate

    @property
    def n_samples(self) -> int:
        """Number of samples."""
        return len(self._samples)

    @property
    def duration(self) -> float:
        """Total duration in seconds."""
        return self.n_samples / self._sample_rate

    def __repr__(self) -> str:
        return f"Sound({self.n_samples} samples, {self.sample_rate} Hz, {self.duration:.3f}s)"

    def frames(self, frame_len: int, frame_shift: int) -> Iterator[Tuple[float, np.ndarray]]:
        """
        Iterate over every full frame.

        Args:
            frame_len: Samples per frame
            frame_shift: Samples between consecutive frame starts

        Yields:
            (time, samples) where time is the frame center in seconds and
            samples is a copy of the frame
        """
        if frame_len <= 0 or frame_shift <= 0:
            raise ValueError(
                f"frame_len and frame_shift must be positive, got {frame_len}, {frame_shift}"
            )

        for start in range(0, self.n_samples - frame_len + 1, frame_shift):
            center = start + frame_len / 2.0
            yield center / self._sample_rate, self._samples[start:start + frame_len].copy()

    def to_pitch(
        self,
        analyzer: Optional[PitchAnalyzer] = None,
        frame_shift: Optional[int] = None,
        **config
    ) -> Pitch:
        """
        Compute the pitch contour frame by frame.

        Args:
            analyzer: Analyzer to use. If None, one is built with
                load_config(**config), using this sound's sample rate
                unless sampling_freq is given.
            frame_shift: Samples between frames (default frame_len // 3)
            **config: AnalyzerConfig overrides, only used without analyzer

        Returns:
            Pitch object

        Raises:
            ConfigurationError: If the analyzer's sampling frequency differs
                from the sound's sample rate
        """
        if analyzer is None:
            config.setdefault("sampling_freq", self._sample_rate)
            analyzer = PitchAnalyzer.from_config(load_config(**config))
        elif config:
            raise ConfigurationError(
                "Pass either an analyzer or configuration options, not both"
            )

        if analyzer.sampling_freq != self._sample_rate:
            raise ConfigurationError(
                f"Analyzer expects {analyzer.sampling_freq:g} Hz, "
                f"sound is {self._sample_rate:g} Hz"
            )

        if frame_shift is None:
            frame_shift = max(1, analyzer.frame_len // 3)

        frames = [analyzer.analyze(samples, time)
                  for time, samples in self.frames(analyzer.frame_len, frame_shift)]

        return Pitch(frames, frame_shift / self._sample_rate,
                     analyzer.min_f0, analyzer.max_f0)
