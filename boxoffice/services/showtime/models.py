"""
Schedule data model: slot catalog, local assignments, persisted planner records.

Field names follow Python style; the planner service's camelCase names
(showTimeId, movieId, showTime, movieName) are accepted as aliases so raw
payloads validate directly.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from boxoffice.core.constants import STATUS_NO_CHANGES
from boxoffice.services.showtime.time_format import normalize

# Identifiers are opaque: the service may use ints or strings.
RecordId = Union[int, str]


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class TimeSlot(BaseModel):
    """One fixed daily showing period. Read-only input from the slot catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: RecordId
    raw_time: str | None = Field(default=None, alias="showTime")
    active: bool = True

    @property
    def display_time(self) -> str:
        return normalize(self.raw_time)


class MovieInfo(BaseModel):
    """Denormalized movie detail carried on planner records (display only)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: RecordId | None = None
    title: str | None = Field(default=None, alias="movieName")
    genre: str | None = None
    language: str | None = None
    certificate: str | None = None
    duration: int | str | None = None
    image: str | None = None


class ShowTimeInfo(BaseModel):
    """Slot detail nested in a planner record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: RecordId | None = None
    raw_time: str | None = Field(default=None, alias="showTime")


class Assignment(BaseModel):
    """
    Local, editable binding of a movie and price to one slot on the selected date.

    planner_record_id is None until the service has persisted it; the combination
    of movie_id and planner_record_id decides the pending operation.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    time_slot_id: RecordId
    movie_id: RecordId | None = None
    movie_title: str | None = None
    planner_record_id: RecordId | None = None
    price: float | None = None
    # True while price is the configured fallback, so the UI can show it as a default
    price_is_default: bool = False

    @field_validator("movie_id", "planner_record_id", "price", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def operation(self) -> Operation:
        if self.movie_id is not None:
            return Operation.UPDATE if self.planner_record_id is not None else Operation.CREATE
        if self.planner_record_id is not None:
            return Operation.DELETE
        return Operation.NOOP


class PlannerRecord(BaseModel):
    """Persisted planner record as returned by the service (source of truth)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: RecordId
    movie_id: RecordId | None = Field(default=None, alias="movieId")
    time_slot_id: RecordId = Field(alias="showTimeId")
    date: str | None = None
    price: float | None = None
    active: bool = True
    movie: MovieInfo | None = None
    show_time: ShowTimeInfo | None = Field(default=None, alias="showTime")

    @field_validator("movie_id", "price", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def raw_time(self) -> str | None:
        return self.show_time.raw_time if self.show_time else None

    @property
    def display_time(self) -> str:
        return normalize(self.raw_time)

    @property
    def movie_title(self) -> str | None:
        return self.movie.title if self.movie else None


class PlannedOperation(BaseModel):
    """One remote write the engine will issue."""

    operation: Operation
    time_slot_id: RecordId
    display_time: str | None = None
    planner_record_id: RecordId | None = None
    movie_id: RecordId | None = None
    price: float | None = None

    def payload(self, date_value: str) -> dict[str, Any]:
        """Body for create/update calls."""
        return {
            "movieId": self.movie_id,
            "showTimeId": self.time_slot_id,
            "date": date_value,
            "price": self.price,
        }


class ReconciliationPlan(BaseModel):
    """Classified, validated and de-duplicated writes for one date."""

    date: str
    creates: list[PlannedOperation] = Field(default_factory=list)
    updates: list[PlannedOperation] = Field(default_factory=list)
    deletes: list[PlannedOperation] = Field(default_factory=list)
    # Slots outside the active catalog that still hold a persisted movie; left untouched
    skipped_inactive: list[RecordId] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    @property
    def operation_count(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes)


class SubmissionResult(BaseModel):
    status: str = STATUS_NO_CHANGES
    date: str
    created: int = 0
    updated: int = 0
    deleted: int = 0
    # Deletes whose record the service no longer had
    already_gone: int = 0
    # False when writes succeeded but the follow-up reload failed
    reloaded: bool = True
    message: str = ""


class ShowOption(BaseModel):
    """One entry of the "available timings" list for a date."""

    time: str
    raw_time: str | None = None
    time_slot_id: RecordId
    planner_record_id: RecordId
    movie_id: RecordId | None = None
    movie_title: str | None = None
    price: float | None = None
    # No longer sellable (start plus buffer has passed)
    past: bool = False
    # Concession receipts closed for this show
    snacks_disabled: bool = False
