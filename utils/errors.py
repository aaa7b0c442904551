"""
Application error hierarchy.

Every error a client can see derives from ``AppError`` and carries its
own HTTP status.  Handlers in ``api.errors`` turn them into JSON bodies.

    AppError
    ├── ValidationError        400
    │   └── WeakPassword       400
    ├── DuplicateUser          400
    ├── InvalidCredentials     401
    ├── Unauthenticated        401
    ├── NotFound               404
    ├── InternalError          500
    └── UpstreamError          500
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing payload.  ``details`` stays server-side."""
        return {"message": self.message, "error_type": self.error_type}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class WeakPassword(ValidationError):
    default_message = "Password must be at least 6 characters"


class DuplicateUser(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class InvalidCredentials(AppError):
    """Same message whether the email or the password was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"


class UpstreamError(AppError):
    """A third-party API call failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service failed"
