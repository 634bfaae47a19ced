"""Custom exceptions for the SpendWise API."""

from typing import Any, Dict, Optional


class SpendwiseError(Exception):
    """Base exception for all SpendWise errors."""

    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(SpendwiseError):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class AuthenticationError(SpendwiseError):
    """Raised when the bearer credential is missing, invalid or expired."""

    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class NotFoundError(SpendwiseError):
    """Raised when a resource is absent or not owned by the caller."""

    error_code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ConflictError(SpendwiseError):
    """Raised on a uniqueness violation (e.g. duplicate budget or email)."""

    error_code = "CONFLICT"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, status_code=409)


class ExternalServiceError(SpendwiseError):
    """Raised by text-generation clients. Always recovered by the insight generator."""

    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, message: str = "External service call failed"):
        super().__init__(message, status_code=502)


class DatabaseError(SpendwiseError):
    """Raised when database operations fail."""

    error_code = "DATABASE_ERROR"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)
