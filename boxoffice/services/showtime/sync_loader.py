"""
Planner sync loader: pull remote truth for a date and rebuild the Desired-State store.

- Slot catalog (load_slots) is read once per session and treated as read-only.
- load_date rebuilds the store keyed by time_slot_id (not display time: two slots
  can normalize to the same string). Active slots with no record get a blank
  assignment at the visible default price.
- On fetch failure the store is reset to blank assignments so the UI shows an
  "unsynced" schedule instead of stale data. The failure is logged, not raised.
- Every load takes a generation number; a load that finishes after a newer one
  started is discarded instead of overwriting the store.
"""
import logging
from collections import namedtuple
from datetime import date, datetime
from typing import Any, Iterable

from pydantic import ValidationError

from boxoffice.core.errors import RemoteServiceError
from boxoffice.services.planner import PlannerClient
from boxoffice.services.showtime.desired_state import DesiredStateStore, slot_key
from boxoffice.services.showtime.models import Assignment, PlannerRecord, ShowOption, TimeSlot
from boxoffice.services.showtime.time_format import (
    is_time_disabled_for_snacks,
    is_time_in_past,
    show_time_sort_key,
)

logger = logging.getLogger(__name__)

# Outcome of one load_date call. stale: a newer load superseded this one.
SyncStatus = namedtuple("SyncStatus", ["date", "synced", "record_count", "error", "stale"], defaults=(None, False))


def parse_slots(rows: Iterable[dict[str, Any]]) -> list[TimeSlot]:
    """Validate slot rows and order them earliest first. Malformed rows are skipped."""
    slots: list[TimeSlot] = []
    for row in rows:
        try:
            slots.append(TimeSlot.model_validate(row))
        except ValidationError as e:
            logger.debug("Skip malformed show time row %s: %s", row, e)
    slots.sort(key=lambda s: show_time_sort_key(s.display_time))
    return slots


def parse_records(rows: Iterable[dict[str, Any]]) -> list[PlannerRecord]:
    records: list[PlannerRecord] = []
    for row in rows:
        try:
            records.append(PlannerRecord.model_validate(row))
        except ValidationError as e:
            logger.warning("Skip malformed planner record %s: %s", row.get("id") if isinstance(row, dict) else row, e)
    return records


def build_assignments(
    records: Iterable[PlannerRecord],
    active_slots: Iterable[TimeSlot],
    default_price: float,
) -> list[Assignment]:
    """
    One assignment per slot: from its planner record when there is one, else blank.
    Records for slots outside the active catalog are kept so they can still be deleted.
    """
    by_slot: dict[str, Assignment] = {}
    for rec in records:
        if not rec.active:
            continue
        key = slot_key(rec.time_slot_id)
        if key in by_slot:
            logger.warning(
                "Slot %s has more than one planner record (%s, %s); keeping the first",
                rec.time_slot_id, by_slot[key].planner_record_id, rec.id,
            )
            continue
        by_slot[key] = Assignment(
            time_slot_id=rec.time_slot_id,
            movie_id=rec.movie_id,
            movie_title=rec.movie_title,
            planner_record_id=rec.id,
            price=rec.price if rec.price is not None else default_price,
            price_is_default=rec.price is None,
        )
    for slot in active_slots:
        key = slot_key(slot.id)
        if key not in by_slot:
            by_slot[key] = Assignment(time_slot_id=slot.id, price=default_price, price_is_default=True)
    return list(by_slot.values())


def list_show_options(
    records: Iterable[PlannerRecord],
    show_date: date | None = None,
    now: datetime | None = None,
) -> list[ShowOption]:
    """
    Bookable shows for a date, earliest first: active records with both a movie and a slot time.
    With show_date, each option is also flagged past / snacks_disabled as of `now`.
    """
    options = [
        ShowOption(
            time=rec.display_time,
            raw_time=rec.raw_time,
            time_slot_id=rec.time_slot_id,
            planner_record_id=rec.id,
            movie_id=rec.movie_id,
            movie_title=rec.movie_title,
            price=rec.price,
        )
        for rec in records
        if rec.active and rec.movie is not None and rec.raw_time
    ]
    options.sort(key=lambda o: show_time_sort_key(o.time))
    if show_date is not None:
        now = now or datetime.now()
        timings = unique_timings(options)
        for o in options:
            o.past = is_time_in_past(show_date, o.time, now)
            o.snacks_disabled = is_time_disabled_for_snacks(timings, o.time, show_date, now)
    return options


def unique_timings(options: Iterable[ShowOption]) -> list[str]:
    """Distinct display times in first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for o in options:
        if o.time not in seen:
            seen.add(o.time)
            out.append(o.time)
    return out


class PlannerSyncLoader:
    """Loads the slot catalog and per-date planner records into a DesiredStateStore."""

    def __init__(self, client: PlannerClient, store: DesiredStateStore) -> None:
        self._client = client
        self._store = store
        self._generation = 0
        self.slots: list[TimeSlot] = []
        self.records: list[PlannerRecord] = []
        self.last_status: SyncStatus | None = None

    @property
    def active_slots(self) -> list[TimeSlot]:
        return [s for s in self.slots if s.active]

    @property
    def generation(self) -> int:
        return self._generation

    async def load_slots(self) -> list[TimeSlot]:
        """Fetch the slot catalog. Raises RemoteServiceError: nothing works without it."""
        self.slots = parse_slots(await self._client.list_show_times())
        logger.info("Loaded %s show time slots (%s active)", len(self.slots), len(self.active_slots))
        return self.slots

    async def load_date(self, day: date) -> SyncStatus:
        """Rebuild the store from the service's planner records for `day`."""
        self._generation += 1
        generation = self._generation
        try:
            rows = await self._client.list_planner_records(day)
        except RemoteServiceError as e:
            if generation != self._generation:
                logger.info("Ignoring failed planner load for %s: superseded by a newer load", day)
                return SyncStatus(day, False, 0, str(e), True)
            logger.warning("Planner records for %s could not be loaded; schedule shown unsynced: %s", day, e, exc_info=True)
            self.records = []
            self._store.reset(day, self.active_slots)
            self.last_status = SyncStatus(day, False, 0, str(e))
            return self.last_status
        if generation != self._generation:
            logger.info("Discarding planner load for %s (generation %s, current %s)", day, generation, self._generation)
            return SyncStatus(day, False, 0, None, True)
        records = parse_records(rows)
        self.records = records
        self._store.replace(day, build_assignments(records, self.active_slots, self._store.default_price))
        logger.info("Loaded %s planner records for %s", len(records), day)
        self.last_status = SyncStatus(day, True, len(records))
        return self.last_status
