"""Project-wide exception types."""

class PopulationFitError(Exception):
    """Base exception for all engine errors."""


class InvalidInputError(PopulationFitError):
    """Raised when observations are negative, non-finite or not integer counts."""


class DegenerateInputError(InvalidInputError):
    """Raised when a histogram has no mass left to fit (e.g. after zero truncation)."""


class ConfigError(PopulationFitError):
    """Raised when configuration is missing or malformed."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for supplied configuration."""


class NoFitError(PopulationFitError):
    """Raised by callers that require a result when no model order could be fitted."""
