"""
Acquisition errors.

Providers raise these internally and turn them into a failed
AcquisitionResult at the ``acquire`` boundary.
"""
from typing import Optional


class ProviderError(Exception):
    """Base class for text acquisition failures."""

    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None, provider: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider


class TransientProviderError(ProviderError):
    """Network failure or 5xx response."""

    retryable = True


class TerminalProviderError(ProviderError):
    """4xx response or malformed request."""


class ResponseParseError(ProviderError):
    """Response body is not JSON or lacks the expected fields."""


class ImageLoadError(ValueError):
    """Image input could not be read or encoded."""
