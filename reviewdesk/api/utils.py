"""Response utilities for converting ServiceResponse to API errors."""

from typing import TypeVar

from reviewdesk.core.errors import error_for_status
from reviewdesk.core.response import ServiceResponse

T = TypeVar('T')


def handle_service_response(response: ServiceResponse[T]) -> T:
    """Return the payload of a successful response or raise the matching ApiError."""
    if response.success:
        return response.data

    status_code = response.code
    if status_code < 400:
        status_code = 400

    raise error_for_status(status_code, response.error or "Unknown error occurred", response.details)
