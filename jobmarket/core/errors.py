"""
Application error taxonomy.

Every failure a request can end in is one of these. The handlers installed by
jobmarket.main turn them into ``{"detail": ..., "code": ...}`` responses.
"""

from typing import Dict, Optional


class AppError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500
    retryable = False

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400


class UnauthenticatedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409


class StoreUnavailableError(AppError):
    """The database timed out or could not be reached. Safe to retry."""

    code = "STORE_UNAVAILABLE"
    status_code = 500
    retryable = True

    def __init__(self, message: str = "Service temporarily unavailable, please retry"):
        super().__init__(message, headers={"Retry-After": "1"})
