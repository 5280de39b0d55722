"""
Schedule session: one operator editing one date.

Wires the slot catalog, Desired-State store, sync loader and reconciliation engine
together and enforces the session rules: changing date forgets the last submission,
and nothing (edits, date changes, another submit) runs while a submission is in flight.
"""
import logging
from datetime import date, datetime
from typing import Any

from boxoffice.core.errors import ScheduleValidationError, SubmissionInProgressError
from boxoffice.services.planner import PlannerClient
from boxoffice.services.showtime.desired_state import DesiredStateStore, slot_key
from boxoffice.services.showtime.models import Assignment, ReconciliationPlan, ShowOption, SubmissionResult, TimeSlot
from boxoffice.services.showtime.reconcile import ReconciliationEngine
from boxoffice.services.showtime.sync_loader import PlannerSyncLoader, SyncStatus, list_show_options

logger = logging.getLogger(__name__)


class ScheduleSession:
    def __init__(
        self,
        client: PlannerClient | None = None,
        *,
        default_price: float | None = None,
        debounce_seconds: float | None = None,
        submit_timeout_seconds: float | None = None,
    ) -> None:
        self.client = client or PlannerClient()
        self.store = DesiredStateStore(default_price)
        self.loader = PlannerSyncLoader(self.client, self.store)
        self.engine = ReconciliationEngine(
            self.client,
            self.store,
            self.loader,
            debounce_seconds=debounce_seconds,
            submit_timeout_seconds=submit_timeout_seconds,
        )
        self.selected_date: date | None = None
        self.last_sync: SyncStatus | None = None

    async def open(self) -> list[TimeSlot]:
        return await self.loader.load_slots()

    def _check_idle(self) -> None:
        if self.engine.in_progress:
            raise SubmissionInProgressError("Wait for the running submission to finish")

    async def select_date(self, day: date, *, refresh: bool = False) -> SyncStatus:
        """Switch to `day` and load its planner records. Same date only reloads when asked."""
        self._check_idle()
        if not self.loader.slots:
            await self.open()
        if day == self.selected_date and not refresh and self.last_sync is not None:
            return self.last_sync
        if day != self.selected_date:
            self.engine.reset_guard()
        self.selected_date = day
        self.last_sync = await self.loader.load_date(day)
        return self.last_sync

    def slot(self, time_slot_id: Any) -> TimeSlot:
        key = slot_key(time_slot_id)
        for s in self.loader.slots:
            if slot_key(s.id) == key:
                return s
        raise KeyError(f"Unknown show time slot: {time_slot_id}")

    def _active_slot(self, time_slot_id: Any) -> TimeSlot:
        s = self.slot(time_slot_id)
        if not s.active:
            raise ScheduleValidationError(
                f"The {s.display_time} show time is inactive and cannot be scheduled.",
                time_slot_id=s.id,
                display_time=s.display_time,
            )
        return s

    def assign(self, time_slot_id: Any, movie_id: Any, movie_title: str | None = None, price: float | None = None) -> Assignment:
        self._check_idle()
        s = self._active_slot(time_slot_id)
        return self.store.assign(s.id, movie_id, movie_title, price)

    def set_price(self, time_slot_id: Any, price: float | None) -> Assignment:
        self._check_idle()
        s = self._active_slot(time_slot_id)
        return self.store.set_price(s.id, price)

    def clear(self, time_slot_id: Any) -> Assignment | None:
        self._check_idle()
        # Inactive slots may still be cleared: that is how a deactivated slot's record gets deleted
        if time_slot_id not in self.store:
            self.slot(time_slot_id)  # KeyError for unknown slots
        return self.store.clear(time_slot_id)

    def _require_date(self) -> date:
        if self.selected_date is None:
            raise ScheduleValidationError("Select a date first.")
        return self.selected_date

    def plan(self) -> ReconciliationPlan:
        return self.engine.plan(self._require_date())

    async def submit(self) -> SubmissionResult:
        day = self._require_date()
        result = await self.engine.submit(day)
        if self.loader.last_status is not None and self.loader.last_status.date == day:
            self.last_sync = self.loader.last_status
        return result

    def show_options(self, now: datetime | None = None) -> list[ShowOption]:
        """Bookable shows on the selected date, flagged past / snacks_disabled as of now."""
        return list_show_options(self.loader.records, self.selected_date, now)

    def view(self) -> list[dict[str, Any]]:
        """Active slots earliest first with their assignment and pending operation."""
        rows = []
        for s in self.loader.active_slots:
            a = self.store.get(s.id) or self.store.blank(s.id)
            rows.append(
                {
                    "time_slot_id": s.id,
                    "display_time": s.display_time,
                    "movie_id": a.movie_id,
                    "movie_title": a.movie_title,
                    "price": a.price,
                    "price_is_default": a.price_is_default,
                    "planner_record_id": a.planner_record_id,
                    "pending": a.operation.value,
                }
            )
        return rows
