"""
Custom exceptions for the Registrar service.
"""

from typing import Optional, Any, Dict


class RegistrarException(Exception):
    """Base exception for all Registrar-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(RegistrarException):
    """Raised when a required field is missing or invalid, or a reference dangles."""
    pass


class ResourceNotFoundError(RegistrarException):
    """Raised when a requested resource is not found."""
    pass


class DependencyError(RegistrarException):
    """Raised when a delete is blocked by records that still reference the target."""
    pass


class PersistenceError(RegistrarException):
    """Raised when persistence operations fail."""
    pass


class ConfigurationError(RegistrarException):
    """Raised when configuration is invalid."""
    pass
