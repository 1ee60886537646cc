"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Upstream API failures are
raised as subclasses of ApiError so route handlers can map them to HTTP
responses in one place.
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationException(ApplicationException):
    """Exception for validation errors raised locally."""


class SnapshotParseError(ValidationException):
    """Raised when a workflow snapshot cannot be decoded."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        super().__init__(
            f"Invalid workflow snapshot field '{field}': {reason}",
            {"field": field, "value": value if isinstance(value, (str, int, float)) else repr(value)}
        )


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class ApiError(ExternalServiceException):
    """Generic failure reported by (or while reaching) the invoicing API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        self.status_code = status_code
        self.reason = message
        super().__init__("Invoicing API", message, details)


class AuthenticationError(ApiError):
    """Raised when the upstream rejects the forwarded token (401)."""


class NotFoundError(ApiError):
    """Raised when the requested upstream resource does not exist (404)."""


class ApiTimeoutError(ApiError):
    """Raised when the upstream did not answer in time."""


class ValidationError(ApiError):
    """Raised when the upstream refuses a request as invalid (422)."""

    def __init__(
        self,
        message: str,
        errors: Any = None,
        status_code: Optional[int] = 422
    ):
        self.errors = errors if errors is not None else {}
        super().__init__(message, status_code, {"errors": self.errors})

    @property
    def messages(self) -> list:
        """Flatten the upstream error payload into a list of strings."""
        if not self.errors:
            return [self.reason]
        if isinstance(self.errors, list):
            return [str(e) for e in self.errors]
        if isinstance(self.errors, dict):
            flat = []
            for key, value in self.errors.items():
                values = value if isinstance(value, list) else [value]
                flat.extend(f"{key} {v}" for v in values)
            return flat
        return [str(self.errors)]
