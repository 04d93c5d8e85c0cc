"""Custom exception hierarchy for amort-calc."""


class AmortCalcError(Exception):
    """Base exception for all amort-calc errors."""


class InvalidInputError(AmortCalcError, ValueError):
    """Raised when user-supplied loan parameters cannot be used."""


class ExportError(AmortCalcError):
    """Raised when a schedule cannot be exported in the requested format."""


class ConfigurationError(AmortCalcError):
    """Raised when configuration is invalid or missing."""
