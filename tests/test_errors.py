import pytest

from reviewdesk.api.utils import handle_service_response
from reviewdesk.core.errors import ApiError, ConflictError, NotFoundError, ValidationError, error_for_status
from reviewdesk.core.response import ServiceResponse


def test_successful_response_returns_data():
    assert handle_service_response(ServiceResponse.success_response({"a": 1})) == {"a": 1}


@pytest.mark.parametrize(
    "response, error_class",
    [
        (ServiceResponse.validation_error("bad", details=["x"]), ValidationError),
        (ServiceResponse.not_found_error("Task"), NotFoundError),
        (ServiceResponse.conflict_error("stale"), ConflictError),
    ],
)
def test_failed_response_raises_matching_error(response, error_class):
    with pytest.raises(error_class) as info:
        handle_service_response(response)
    assert info.value.status_code == response.code
    assert info.value.message == response.error


def test_error_body_omits_empty_details():
    assert NotFoundError("Task not found").to_dict() == {"error": "Task not found"}
    assert ValidationError("bad", details=["x"]).to_dict() == {"error": "bad", "details": ["x"]}


def test_unknown_status_falls_back_to_api_error():
    error = error_for_status(500, "boom")
    assert type(error) is ApiError
    assert error.status_code == 500
