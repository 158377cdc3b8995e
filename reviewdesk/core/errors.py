"""API error classes rendered as ``{"error": ..., "details": ...}``."""

from typing import Any, Dict, Optional, Type


class ApiError(Exception):
    """Base API error carrying an HTTP status code."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, details: Any = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation error"


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


ERRORS_BY_STATUS: Dict[int, Type[ApiError]] = {
    error.status_code: error
    for error in (ValidationError, UnauthorizedError, ForbiddenError, NotFoundError, ConflictError)
}


def error_for_status(status_code: int, message: Optional[str] = None, details: Any = None) -> ApiError:
    """Build the ApiError subclass matching ``status_code``."""
    error_class = ERRORS_BY_STATUS.get(status_code)
    if error_class is None:
        return ApiError(message, status_code=status_code, details=details)
    return error_class(message, details=details)
