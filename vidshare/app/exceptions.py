"""
Error taxonomy for the API.

Every error raised by services and dependencies is an ``ApiError``; the
handlers in ``vidshare.app.responses`` render it as the error envelope.
"""
from typing import Any, List, Optional


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed identifier or missing/empty required field."""
    status_code = 400
    default_message = "Invalid request"


class InvalidOperation(ApiError):
    status_code = 400
    default_message = "Operation not allowed"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized access"


class PermissionDenied(ApiError):
    """The actor is authenticated but does not own the entity."""
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflicting request"


class UploadError(ApiError):
    status_code = 500
    default_message = "File upload failed"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"
