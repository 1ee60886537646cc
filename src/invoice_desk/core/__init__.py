"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from invoice_desk.core.exceptions import (
    ApplicationException,
    ValidationException,
    SnapshotParseError,
    ConfigurationException,
    ExternalServiceException,
    ApiError,
    AuthenticationError,
    NotFoundError,
    ApiTimeoutError,
    ValidationError,
)

__all__ = [
    "ApplicationException",
    "ValidationException",
    "SnapshotParseError",
    "ConfigurationException",
    "ExternalServiceException",
    "ApiError",
    "AuthenticationError",
    "NotFoundError",
    "ApiTimeoutError",
    "ValidationError",
]
