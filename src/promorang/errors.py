"""Exceptions raised by the Promorang client."""
from typing import Optional


class PromorangError(Exception):
    """Base class for every error raised by this package."""


class ApiError(PromorangError):
    """The backend rejected a request or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ValidationError(PromorangError, ValueError):
    """Input rejected before any request was sent."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message
