"""
Schedule reconciliation: turn the operator's edits for one date into the minimal
create/update/delete writes against the planner service, applied once per submission.

Per slot (from the Desired-State store):
  movie, no record     -> CREATE
  movie, record        -> UPDATE
  no movie, record     -> DELETE
  no movie, no record  -> skip

Steps: classify -> validate prices -> de-duplicate -> fingerprint guard -> one batch
CREATE, then sequential UPDATEs and DELETEs -> reload the date and rebuild the store.
Any failure other than the client's handled path fallback / already-deleted cases
aborts the whole submission; the store is left as it was so the operator can retry.
"""
import asyncio
import hashlib
import json
import logging
import time
from datetime import date
from typing import Callable, Iterable

from boxoffice.config import settings
from boxoffice.core.constants import STATUS_NO_CHANGES, STATUS_SYNCED
from boxoffice.core.errors import (
    RemoteServiceError,
    ScheduleValidationError,
    SubmissionError,
    SubmissionInProgressError,
)
from boxoffice.services.planner import PlannerClient
from boxoffice.services.showtime.desired_state import DesiredStateStore, slot_key
from boxoffice.services.showtime.models import (
    Assignment,
    Operation,
    PlannedOperation,
    ReconciliationPlan,
    SubmissionResult,
    TimeSlot,
)
from boxoffice.services.showtime.sync_loader import PlannerSyncLoader
from boxoffice.services.showtime.time_format import midnight_utc

logger = logging.getLogger(__name__)


def _planned(op: Operation, a: Assignment, display_time: str | None) -> PlannedOperation:
    return PlannedOperation(
        operation=op,
        time_slot_id=a.time_slot_id,
        display_time=display_time,
        planner_record_id=a.planner_record_id,
        movie_id=a.movie_id,
        price=a.price,
    )


def classify(
    store: DesiredStateStore,
    active_slots: Iterable[TimeSlot],
    day: date,
) -> ReconciliationPlan:
    """
    Classify, validate and de-duplicate every slot's pending write. Raises
    ScheduleValidationError (nothing sent) if an assigned slot has no price.
    """
    plan = ReconciliationPlan(date=midnight_utc(day))
    active = {slot_key(s.id): s for s in active_slots}
    seen_creates: set[tuple[str, str, str]] = set()
    seen_records: set[str] = set()

    def add(op: PlannedOperation) -> None:
        if op.operation is Operation.CREATE:
            key = (str(op.movie_id), slot_key(op.time_slot_id), plan.date)
            if key in seen_creates:
                logger.warning("Dropping duplicate create for slot %s", op.time_slot_id)
                return
            seen_creates.add(key)
            plan.creates.append(op)
            return
        rid = str(op.planner_record_id)
        if rid in seen_records:
            logger.warning("Dropping duplicate %s for planner record %s", op.operation.value, rid)
            return
        seen_records.add(rid)
        (plan.updates if op.operation is Operation.UPDATE else plan.deletes).append(op)

    for key, slot in active.items():
        a = store.get(key)
        if a is None:
            continue
        op = a.operation
        if op is Operation.NOOP:
            continue
        if op in (Operation.CREATE, Operation.UPDATE) and a.price is None:
            raise ScheduleValidationError(
                f"Set a ticket price for the {slot.display_time} show before saving.",
                time_slot_id=slot.id,
                display_time=slot.display_time,
            )
        add(_planned(op, a, slot.display_time))

    # Slots no longer in the active catalog can only be cleaned up, never scheduled
    for key, a in store.items():
        if key in active:
            continue
        op = a.operation
        if op is Operation.DELETE:
            add(_planned(op, a, None))
        elif op in (Operation.CREATE, Operation.UPDATE):
            logger.warning(
                "Slot %s is not active; leaving its assignment (record %s) untouched",
                a.time_slot_id, a.planner_record_id,
            )
            plan.skipped_inactive.append(a.time_slot_id)
    return plan


class ReconciliationEngine:
    """
    Applies a store's pending writes for one date. Owns the "last successful
    submission" fingerprint and the submission-in-progress guard for its session.
    """

    def __init__(
        self,
        client: PlannerClient,
        store: DesiredStateStore,
        loader: PlannerSyncLoader,
        *,
        debounce_seconds: float | None = None,
        submit_timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._store = store
        self._loader = loader
        self._debounce = debounce_seconds if debounce_seconds is not None else settings.fingerprint_debounce_seconds
        self._submit_timeout = (
            submit_timeout_seconds if submit_timeout_seconds is not None else settings.submit_timeout_seconds
        )
        self._clock = clock
        self._in_progress = False
        self._last_fingerprint: str | None = None
        self._guard_revision: int | None = None

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def last_fingerprint(self) -> str | None:
        return self._last_fingerprint

    def reset_guard(self) -> None:
        """Forget the last successful submission (date changed)."""
        self._last_fingerprint = None
        self._guard_revision = None

    def fingerprint(self, day: date) -> str:
        snap = self._store.snapshot()
        raw = json.dumps(
            {"date": day.isoformat(), "assignments": snap["assignments"], "prices": snap["prices"]},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(raw.encode()).hexdigest()

    def _refresh_guard(self) -> None:
        """Drop the guard once the store has been edited and the edits have settled."""
        if self._last_fingerprint is None or self._store.revision == self._guard_revision:
            return
        last_edit = self._store.last_edit_at
        if last_edit is not None and self._clock() - last_edit < self._debounce:
            return
        logger.debug("Schedule edited since last save; clearing resubmission guard")
        self.reset_guard()

    def _record_success(self, fingerprint: str) -> None:
        self._last_fingerprint = fingerprint
        self._guard_revision = self._store.revision

    def plan(self, day: date, active_slots: Iterable[TimeSlot] | None = None) -> ReconciliationPlan:
        return classify(self._store, self._loader.active_slots if active_slots is None else active_slots, day)

    async def submit(self, day: date, active_slots: Iterable[TimeSlot] | None = None) -> SubmissionResult:
        """
        Reconcile the store for `day` against the service. Rejects re-entry while a
        submission is running and fails explicitly if it takes longer than the timeout.
        """
        if self._in_progress:
            raise SubmissionInProgressError("A schedule submission is already in progress")
        self._in_progress = True
        try:
            return await asyncio.wait_for(self._submit(day, active_slots), timeout=self._submit_timeout)
        except asyncio.TimeoutError as e:
            logger.error("Schedule submission for %s timed out after %ss", day, self._submit_timeout)
            raise SubmissionError(operation="timeout", cause=e) from e
        finally:
            self._in_progress = False

    async def _submit(self, day: date, active_slots: Iterable[TimeSlot] | None) -> SubmissionResult:
        self._refresh_guard()
        plan = self.plan(day, active_slots)
        fingerprint = self.fingerprint(day)
        if fingerprint == self._last_fingerprint:
            logger.info("Schedule for %s unchanged since last save; nothing sent", day)
            return SubmissionResult(status=STATUS_NO_CHANGES, date=plan.date, message="No changes since the last save.")
        if plan.is_empty:
            self._record_success(fingerprint)
            return SubmissionResult(status=STATUS_NO_CHANGES, date=plan.date, message="Nothing to save.")

        result = SubmissionResult(status=STATUS_SYNCED, date=plan.date)
        await self._execute(plan, result)

        status = await self._loader.load_date(day)
        result.reloaded = bool(status.synced)
        if status.synced:
            self._record_success(self.fingerprint(day))
        else:
            logger.warning("Schedule for %s saved but reload failed: %s", day, status.error)
        result.message = (
            f"Saved schedule for {day.isoformat()}: {result.created} added, "
            f"{result.updated} updated, {result.deleted} removed."
        )
        logger.info(
            "Schedule for %s synced: created=%s updated=%s deleted=%s (already gone %s)",
            day, result.created, result.updated, result.deleted, result.already_gone,
        )
        return result

    async def _execute(self, plan: ReconciliationPlan, result: SubmissionResult) -> None:
        current: PlannedOperation | None = None
        try:
            if plan.creates:
                await self._client.create_planner_records([op.payload(plan.date) for op in plan.creates])
                result.created = len(plan.creates)
            for op in plan.updates:
                current = op
                await self._client.update_planner_record(op.planner_record_id, op.payload(plan.date))
                result.updated += 1
            for op in plan.deletes:
                current = op
                if not await self._client.delete_planner_record(op.planner_record_id):
                    result.already_gone += 1
                result.deleted += 1
        except RemoteServiceError as e:
            logger.error(
                "Schedule submission for %s failed on %s (slot %s, record %s): %s",
                plan.date,
                e.operation,
                current.time_slot_id if current else None,
                current.planner_record_id if current else None,
                e,
                exc_info=True,
            )
            if result.created or result.updated or result.deleted:
                # Not rolled back; a retry before the next reload sends these creates again
                logger.warning(
                    "Writes already applied for %s before the failure: created=%s updated=%s deleted=%s",
                    plan.date, result.created, result.updated, result.deleted,
                )
            raise SubmissionError(
                operation=e.operation,
                time_slot_id=current.time_slot_id if current else None,
                planner_record_id=current.planner_record_id if current else None,
                cause=e,
            ) from e
