"""Exception hierarchy for image conversion and backend configuration."""

from __future__ import annotations


class FallbackError(Exception):
    """Base error for the package.

    Parameters
    ----------
    message : str
        Human readable error message.
    exit_code : int, default=1
        Process exit code used by the CLI.
    """

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ConfigurationError(FallbackError):
    """Backend settings are invalid or the configured backend is unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=2)


class ConversionError(FallbackError):
    """Conversion parameters were rejected before any backend ran."""


class BackendError(FallbackError):
    """Backend registration or lookup failed."""
