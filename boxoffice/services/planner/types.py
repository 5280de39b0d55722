"""
Typed definitions for planner service payloads.

GET /show-times returns slot definitions; GET /show-time-planner/date/{date} returns
planner records with the movie and slot denormalized onto each row. Writes send
PlannerWritePayload (create as a list, update one at a time).
"""

from typing import TypedDict


class ShowTimeRow(TypedDict, total=False):
    """One slot from /show-times."""
    id: int | str
    showTime: str  # e.g. "14:30:00", "2025-08-14 14:30:00" or "2:30 PM"
    active: bool


class PlannerMovieRow(TypedDict, total=False):
    """Movie object nested on a planner record."""
    id: int | str
    movieName: str
    genre: str
    language: str
    certificate: str
    duration: int
    image: str


class PlannerRecordRow(TypedDict, total=False):
    """One planner record (a movie booked into a slot on a date)."""
    id: int | str
    movieId: int | str
    showTimeId: int | str
    date: str  # midnight UTC, e.g. "2025-08-14T00:00:00.000Z"
    price: float
    active: bool
    movie: PlannerMovieRow
    showTime: ShowTimeRow


class PlannerWritePayload(TypedDict):
    """Body for create (one per list item) and update."""
    movieId: int | str
    showTimeId: int | str
    date: str
    price: float
