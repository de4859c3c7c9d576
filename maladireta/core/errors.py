# maladireta/core/errors.py
"""
Domain errors raised by services and auth dependencies.

Each carries the HTTP status it maps to; ``main.py`` registers a single
handler that renders them as ``{"detail": message}``.
"""

from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, fields: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.fields = fields
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid data"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AppError):
    status_code = 403
    default_message = "Permission denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Already exists"


class InvalidOrExpiredToken(AppError):
    status_code = 400
    default_message = "Invalid or expired token"


class Internal(AppError):
    status_code = 500
