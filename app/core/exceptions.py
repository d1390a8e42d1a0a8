"""
Application errors.

Services raise these; the API layer turns them into JSON responses using
``status_code`` and ``message``.
"""
from http import HTTPStatus
from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Error message returned to the caller
        status_code: HTTP status code
        code: Application error code
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {"error": self.message}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(AppException):
    """Raised when required input is missing or malformed."""

    status_code = HTTPStatus.BAD_REQUEST


class InvalidInputError(ValidationError):
    """Raised when an input value has the wrong shape (e.g. not a data URL)."""


class ConfigurationError(AppException):
    """Raised when a required credential or setting is missing."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class UpstreamError(AppException):
    """Raised when a third-party call fails or returns an unexpected shape."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class ServiceError(UpstreamError):
    """Raised when the image analysis model fails for a non-recoverable reason."""


class NotFoundError(AppException):
    """Raised when no record exists for the given key."""

    status_code = HTTPStatus.NOT_FOUND
