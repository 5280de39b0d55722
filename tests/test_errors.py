import pytest

from boxoffice.core.errors import (
    MSG_ENDPOINT_SHAPE,
    MSG_SUBMISSION_FAILED,
    MSG_SUBMISSION_IN_PROGRESS,
    EndpointShapeError,
    RemoteServiceError,
    ScheduleValidationError,
    SubmissionError,
    SubmissionInProgressError,
    planner_error_to_http,
)


def _shape_error() -> EndpointShapeError:
    return EndpointShapeError(
        "no convention",
        operation="delete",
        attempted_paths=["DELETE /a/1", "DELETE /b/1"],
        statuses=[405, 405],
    )


@pytest.mark.parametrize(
    "exc, status_code, detail",
    [
        (ScheduleValidationError("Set a ticket price for the 10:30 AM show before saving."), 422,
         "Set a ticket price for the 10:30 AM show before saving."),
        (SubmissionInProgressError("busy"), 409, MSG_SUBMISSION_IN_PROGRESS),
        (SubmissionError(operation="update"), 502, MSG_SUBMISSION_FAILED),
        (RemoteServiceError("Planner API error: 503", operation="list_show_times", status_code=503), 502,
         "Planner API error: 503"),
        (ValueError("boom"), 500, "boom"),
    ],
)
def test_planner_error_to_http(exc, status_code, detail):
    http = planner_error_to_http(exc)
    assert http.status_code == status_code
    assert http.detail == detail


def test_endpoint_shape_errors_point_at_configuration():
    assert planner_error_to_http(_shape_error()).detail == MSG_ENDPOINT_SHAPE
    wrapped = SubmissionError(operation="delete", cause=_shape_error())
    assert planner_error_to_http(wrapped).status_code == 502
    assert planner_error_to_http(wrapped).detail == MSG_ENDPOINT_SHAPE


def test_endpoint_shape_error_keeps_last_attempt():
    err = _shape_error()
    assert isinstance(err, RemoteServiceError)
    assert err.status_code == 405
    assert err.path == "DELETE /b/1"


def test_submission_error_diagnostics():
    err = SubmissionError(operation="delete", time_slot_id=3, planner_record_id=56, cause=_shape_error())
    diag = err.diagnostics()
    assert diag["operation"] == "delete"
    assert diag["time_slot_id"] == 3
    assert diag["planner_record_id"] == 56
    assert diag["attempted_paths"] == ["DELETE /a/1", "DELETE /b/1"]
    assert str(err) == MSG_SUBMISSION_FAILED
