"""
Schedule API: the operator console's show time planner for one date.

Load a date, edit slot assignments, preview the pending writes and submit them.
All routes share the single ScheduleSession created in main.lifespan.
"""
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from boxoffice.core.errors import PlannerError, SubmissionError, planner_error_to_http
from boxoffice.services.showtime import ScheduleSession
from boxoffice.services.showtime.sync_loader import unique_timings

router = APIRouter()
logger = logging.getLogger(__name__)


class SlotAssignmentUpdate(BaseModel):
    """Fields left out are not changed. movie_id null clears the slot."""
    movie_id: int | str | None = None
    movie_title: str | None = None
    price: float | None = None


def get_session(request: Request) -> ScheduleSession:
    session = getattr(request.app.state, "schedule_session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Schedule session not ready")
    return session


async def _on_date(session: ScheduleSession, day: date) -> None:
    try:
        await session.select_date(day)
    except PlannerError as e:
        raise planner_error_to_http(e) from e


def _row(session: ScheduleSession, slot_id: Any) -> dict[str, Any]:
    key = str(slot_id)
    for row in session.view():
        if str(row["time_slot_id"]) == key:
            return row
    a = session.store.get(slot_id)
    return a.model_dump() if a else {}


@router.get("/slots", response_model=list)
async def list_slots(session: ScheduleSession = Depends(get_session)):
    """Slot catalog, earliest first, with canonical display times."""
    return [
        {"id": s.id, "raw_time": s.raw_time, "display_time": s.display_time, "active": s.active}
        for s in session.loader.slots
    ]


@router.get("/{day}", response_model=dict)
async def get_schedule(day: date, refresh: bool = False, session: ScheduleSession = Depends(get_session)):
    """Assignments for every active slot on `day`. refresh=true re-reads the planner service."""
    try:
        status = await session.select_date(day, refresh=refresh)
    except PlannerError as e:
        raise planner_error_to_http(e) from e
    return {
        "date": day.isoformat(),
        "synced": status.synced,
        "error": status.error,
        "default_price": session.store.default_price,
        "slots": session.view(),
    }


@router.put("/{day}/slots/{slot_id}", response_model=dict)
async def update_slot(
    day: date,
    slot_id: str,
    body: SlotAssignmentUpdate,
    session: ScheduleSession = Depends(get_session),
):
    """Assign a movie and/or price to a slot. Nothing is sent until submit."""
    await _on_date(session, day)
    fields = body.model_fields_set
    try:
        if "movie_id" in fields:
            if body.movie_id is None:
                session.clear(slot_id)
            else:
                session.assign(slot_id, body.movie_id, body.movie_title)
        # An explicit null price unsets it, which blocks submitting an assigned slot
        if "price" in fields:
            session.set_price(slot_id, body.price)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e).strip("'\"")) from e
    except PlannerError as e:
        raise planner_error_to_http(e) from e
    return _row(session, slot_id)


@router.delete("/{day}/slots/{slot_id}", response_model=dict)
async def clear_slot(day: date, slot_id: str, session: ScheduleSession = Depends(get_session)):
    """Remove the movie from a slot (deletes the planner record on submit if it was saved)."""
    await _on_date(session, day)
    try:
        session.clear(slot_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e).strip("'\"")) from e
    except PlannerError as e:
        raise planner_error_to_http(e) from e
    return _row(session, slot_id)


@router.get("/{day}/plan", response_model=dict)
async def preview_plan(day: date, session: ScheduleSession = Depends(get_session)):
    """Writes a submit would issue right now (no network calls)."""
    await _on_date(session, day)
    try:
        return session.plan().model_dump(mode="json")
    except PlannerError as e:
        raise planner_error_to_http(e) from e


@router.post("/{day}/submit", response_model=dict)
async def submit_schedule(day: date, session: ScheduleSession = Depends(get_session)):
    """Save the date's schedule to the planner service."""
    await _on_date(session, day)
    try:
        result = await session.submit()
    except PlannerError as e:
        diagnostics = e.diagnostics() if isinstance(e, SubmissionError) else {}
        logger.warning("Schedule submit for %s rejected: %s %s", day, e, diagnostics)
        raise planner_error_to_http(e) from e
    return result.model_dump(mode="json")


@router.get("/{day}/timings", response_model=dict)
async def list_timings(day: date, session: ScheduleSession = Depends(get_session)):
    """Bookable shows for `day`, earliest first (ticketing / concessions dropdowns)."""
    await _on_date(session, day)
    options = session.show_options()
    return {
        "date": day.isoformat(),
        "timings": unique_timings(options),
        # Timings still sellable now; past ones are shown disabled
        "available_timings": unique_timings(o for o in options if not o.past),
        "shows": [o.model_dump(mode="json") for o in options],
    }
