"""
API error taxonomy.

Every error carries the HTTP status it maps to. Handlers registered in
main.py render them as {"success": false, "message": ..., "errors"?: [...]}.
"""

from typing import Any, List, Optional


class APIError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(APIError):
    """Missing or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class AuthError(APIError):
    """Missing, invalid or expired credential."""
    status_code = 401
    default_message = "Invalid or expired token"


class AuthorizationError(APIError):
    """Valid credential, insufficient role or ownership."""
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(APIError):
    """Duplicate application, membership or account."""
    status_code = 400
    default_message = "Resource already exists"


class DependencyError(APIError):
    """Store or notifier failure. The caller only sees a generic message."""
    status_code = 500
    default_message = "Something went wrong. Please try again later."
