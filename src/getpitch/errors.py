"""Exceptions raised by getpitch."""


class ConfigurationError(ValueError):
    """Raised when an analyzer is configured with unusable parameters."""
