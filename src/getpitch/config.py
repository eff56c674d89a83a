"""
Analyzer configuration.

An AnalyzerConfig carries everything a PitchAnalyzer needs: frame length,
sampling frequency, window kind, F0 search bounds and the three voicing
thresholds. Each analyzer owns its own copy, so differently tuned analyzers
can coexist in one process.

Configuration sources, in order of precedence:
  1. Keyword overrides passed to load_config()
  2. A TOML file: the explicit path, else the GETPITCH_CONFIG environment
     variable, else ./getpitch.toml, else ~/.getpitch/config.toml
  3. Dataclass defaults

Config file format:

    frame_len = 480
    sampling_freq = 16000
    window = "hamming"

    [f0_range]
    min = 50
    max = 500

    [thresholds]
    pot = -50.5
    r1norm = 0.7
    rmaxnorm = 0.3
"""

import logging
import numbers
import os
import sys
import warnings
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import ConfigurationError
from .window import HAMMING, normalize_window_kind

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GETPITCH_CONFIG"
LOCAL_CONFIG = "getpitch.toml"


@dataclass(frozen=True)
class Thresholds:
    """Voicing decision thresholds."""
    pot: float = -50.5      # dB, minimum frame log power
    r1norm: float = 0.70    # minimum r[1] / r[0]
    rmaxnorm: float = 0.30  # minimum r[lag] / r[0]


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Configuration of a PitchAnalyzer.

    Attributes:
        frame_len: Samples per frame
        sampling_freq: Sampling frequency in Hz
        window: Window kind ("hamming" or "rectangular")
        min_f0: Lowest admissible F0 in Hz
        max_f0: Highest admissible F0 in Hz
        thresholds: Voicing thresholds
    """
    frame_len: int = 480
    sampling_freq: float = 16000.0
    window: str = HAMMING
    min_f0: float = 50.0
    max_f0: float = 500.0
    thresholds: Thresholds = field(default_factory=Thresholds)

    def __post_init__(self):
        if isinstance(self.frame_len, bool) or not isinstance(self.frame_len, numbers.Integral):
            raise ConfigurationError(f"frame_len must be an integer, got {self.frame_len!r}")
        if self.frame_len <= 0:
            raise ConfigurationError(f"frame_len must be positive, got {self.frame_len}")
        if self.sampling_freq <= 0:
            raise ConfigurationError(f"sampling_freq must be positive, got {self.sampling_freq}")
        if self.min_f0 <= 0 or self.max_f0 <= 0:
            raise ConfigurationError(
                f"F0 bounds must be positive, got min_f0={self.min_f0}, max_f0={self.max_f0}"
            )
        if self.min_f0 >= self.max_f0:
            raise ConfigurationError(
                f"min_f0 ({self.min_f0}) must be lower than max_f0 ({self.max_f0})"
            )
        # frozen dataclass: bypass __setattr__ to store the canonical name
        object.__setattr__(self, "window", normalize_window_kind(self.window))


def find_config_file() -> Optional[Path]:
    """
    Locate the config file to use when no explicit path is given.

    Returns:
        Path to the config file, or None if none exists.

    Raises:
        ConfigurationError: If GETPITCH_CONFIG names a missing file
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigurationError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path

    local_config = Path(LOCAL_CONFIG)
    if local_config.exists():
        return local_config

    user_config = Path.home() / ".getpitch" / "config.toml"
    if user_config.exists():
        return user_config

    return None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e


def _flatten(data: Dict[str, Any], path: Path) -> Dict[str, Any]:
    """Turn the nested file layout into AnalyzerConfig keyword arguments."""
    flat = {}
    for key, value in data.items():
        if key == "f0_range":
            if not isinstance(value, dict):
                raise ConfigurationError(f"{path}: [f0_range] must be a table")
            for sub, dest in (("min", "min_f0"), ("max", "max_f0")):
                if sub in value:
                    flat[dest] = value[sub]
            unknown = set(value) - {"min", "max"}
            if unknown:
                warnings.warn(f"{path}: ignoring unknown f0_range keys {sorted(unknown)}")
        elif key == "thresholds":
            if not isinstance(value, dict):
                raise ConfigurationError(f"{path}: [thresholds] must be a table")
            known = {f.name for f in fields(Thresholds)}
            unknown = set(value) - known
            if unknown:
                warnings.warn(f"{path}: ignoring unknown threshold keys {sorted(unknown)}")
            flat["thresholds"] = {k: v for k, v in value.items() if k in known}
        elif key in ("frame_len", "sampling_freq", "window"):
            flat[key] = value
        else:
            warnings.warn(f"{path}: ignoring unknown config key {key!r}")
    return flat


def _build(values: Dict[str, Any]) -> AnalyzerConfig:
    thresholds = values.pop("thresholds", None)
    config = AnalyzerConfig(**values)
    if thresholds is None:
        return config
    if isinstance(thresholds, Thresholds):
        return replace(config, thresholds=thresholds)
    try:
        thresholds = Thresholds(**{k: float(v) for k, v in thresholds.items()})
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid thresholds: {e}") from e
    return replace(config, thresholds=thresholds)


def load_config(path: Optional[Union[str, Path]] = None, **overrides) -> AnalyzerConfig:
    """
    Build an AnalyzerConfig from a config file and keyword overrides.

    Args:
        path: Explicit TOML file (must exist). If None, the file is looked up
            via GETPITCH_CONFIG, ./getpitch.toml and ~/.getpitch/config.toml.
        **overrides: AnalyzerConfig fields; these win over the file. The
            thresholds override may be a Thresholds or a dict.

    Returns:
        AnalyzerConfig

    Raises:
        ConfigurationError: If the file is missing or invalid, or the
            resulting configuration is unusable
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
    else:
        path = find_config_file()

    values: Dict[str, Any] = {}
    if path is not None:
        logger.info("Loading pitch analyzer config from %s", path)
        values.update(_flatten(_read_toml(path), path))

    known = {f.name for f in fields(AnalyzerConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ConfigurationError(f"Unknown configuration options: {sorted(unknown)}")

    file_thresholds = values.get("thresholds")
    override_thresholds = overrides.get("thresholds")
    values.update(overrides)
    if isinstance(file_thresholds, dict) and isinstance(override_thresholds, dict):
        values["thresholds"] = {**file_thresholds, **override_thresholds}

    try:
        return _build(values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
