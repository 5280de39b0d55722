"""
Centralized error handling for planner sync failures.
Exception types raised by the planner client and reconciliation engine, plus a
reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Any, Callable

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_CONFLICT = 409  # another submission is still running
STATUS_UNPROCESSABLE = 422  # validation: slot missing a price
STATUS_BAD_GATEWAY = 502  # planner service refused or failed the write
STATUS_INTERNAL_ERROR = 500

MSG_SUBMISSION_IN_PROGRESS = "A schedule submission is already running. Wait for it to finish."
MSG_SUBMISSION_FAILED = "Schedule could not be saved. Nothing was confirmed; your edits are kept, try again."
MSG_ENDPOINT_SHAPE = "Planner service does not accept this request shape. Check PLANNER_API_BASE_URL."


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PlannerError(Exception):
    """Base for everything the planner client and sync engine raise."""


class ScheduleValidationError(PlannerError):
    """An assigned slot cannot be submitted (e.g. no price). Raised before any network call."""

    def __init__(self, message: str, *, time_slot_id: Any = None, display_time: str | None = None):
        super().__init__(message)
        self.time_slot_id = time_slot_id
        self.display_time = display_time


class RemoteServiceError(PlannerError):
    """Planner service answered with an error (auth, 5xx, ...) or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: int | None = None,
        path: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.path = path
        self.detail = detail


class EndpointShapeError(RemoteServiceError):
    """Every path convention for a write answered 404/405."""

    def __init__(self, message: str, *, operation: str, attempted_paths: list[str], statuses: list[int]):
        super().__init__(
            message,
            operation=operation,
            status_code=statuses[-1] if statuses else None,
            path=attempted_paths[-1] if attempted_paths else None,
        )
        self.attempted_paths = attempted_paths
        self.statuses = statuses


class SubmissionInProgressError(PlannerError):
    """Submit called while a previous submission has not resolved."""


class SubmissionError(PlannerError):
    """
    Fatal failure of a whole submission. The operator sees one message; the
    failing slot/operation and the underlying cause are kept for diagnostics.
    """

    def __init__(
        self,
        message: str = MSG_SUBMISSION_FAILED,
        *,
        operation: str | None = None,
        time_slot_id: Any = None,
        planner_record_id: Any = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.time_slot_id = time_slot_id
        self.planner_record_id = planner_record_id
        self.cause = cause

    def diagnostics(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "operation": self.operation,
            "time_slot_id": self.time_slot_id,
            "planner_record_id": self.planner_record_id,
        }
        if isinstance(self.cause, RemoteServiceError):
            out["status_code"] = self.cause.status_code
            out["path"] = self.cause.path
        if isinstance(self.cause, EndpointShapeError):
            out["attempted_paths"] = self.cause.attempted_paths
        if self.cause is not None:
            out["cause"] = str(self.cause)
        return out


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail builder)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------


def _is_validation(exc: Exception) -> bool:
    return isinstance(exc, ScheduleValidationError)


def _is_in_progress(exc: Exception) -> bool:
    return isinstance(exc, SubmissionInProgressError)


def _is_endpoint_shape(exc: Exception) -> bool:
    return isinstance(exc, EndpointShapeError) or (
        isinstance(exc, SubmissionError) and isinstance(exc.cause, EndpointShapeError)
    )


def _is_remote(exc: Exception) -> bool:
    return isinstance(exc, (SubmissionError, RemoteServiceError))


# List of (predicate, status_code, detail). First match wins.
PLANNER_ERROR_RULES: list[tuple[Callable[[Exception], bool], int, Callable[[Exception], str]]] = [
    (_is_validation, STATUS_UNPROCESSABLE, str),
    (_is_in_progress, STATUS_CONFLICT, lambda _e: MSG_SUBMISSION_IN_PROGRESS),
    (_is_endpoint_shape, STATUS_BAD_GATEWAY, lambda _e: MSG_ENDPOINT_SHAPE),
    (_is_remote, STATUS_BAD_GATEWAY, str),
]


def planner_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from the planner client or sync engine into an HTTPException.
    Uses PLANNER_ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for predicate, status_code, detail in PLANNER_ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
