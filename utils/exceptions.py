"""
API exception taxonomy.

Every error a request can end in is one of these. The error handlers in
api/errors.py render them into the uniform `{"error", "code", "status"}`
envelope, so views and services only ever need to raise.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class APIError(Exception):
    """Base for all errors that map to an HTTP response."""

    status_code = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class RequestValidationError(APIError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid input"


class DuplicateCredential(APIError):
    status_code = 400
    code = "DUPLICATE_CREDENTIAL"
    message = "Username or email already exists!"


class InvalidCredentials(APIError):
    status_code = 400
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class MissingRefreshToken(APIError):
    status_code = 400
    code = "MISSING_TOKEN"
    message = "Refresh token required"


class InvalidOrExpiredToken(APIError):
    status_code = 400
    code = "INVALID_OR_EXPIRED_TOKEN"
    message = "Invalid or expired refresh token"


class InvalidRefreshToken(APIError):
    """Refresh token is well formed but is not the one stored for its user."""

    status_code = 403
    code = "INVALID_REFRESH_TOKEN"
    message = "Invalid refresh token"


class NotAuthorized(APIError):
    status_code = 403
    code = "NOT_AUTHORIZED"
    message = "Not Authorized!"


class MissingAuthHeader(NotAuthorized):
    message = "Authorization header not found!"


class MissingToken(NotAuthorized):
    message = "Authorization token missing!"


class NotFound(APIError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class StoreError(APIError):
    status_code = 500
    code = "STORE_ERROR"
    message = "A database error occurred"
