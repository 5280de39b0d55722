"""
Desired-State store: the locally edited assignment for every slot on the selected date.

Written by exactly two parties: operator edits (assign / set_price / clear) and the
planner sync loader (replace / reset) after a load. Edits bump `revision` and
`last_edit_at`; loads do not, since they describe remote truth rather than a change
the operator made.
"""
import logging
import time
from datetime import date
from typing import Any, Callable, Iterable, Iterator

from boxoffice.config import settings
from boxoffice.services.showtime.models import Assignment, Operation, TimeSlot

logger = logging.getLogger(__name__)


def slot_key(time_slot_id: Any) -> str:
    """Store key for a slot id. Path params arrive as strings, the service may use ints."""
    return str(time_slot_id)


class DesiredStateStore:
    """In-memory time_slot_id -> Assignment mapping for one date."""

    def __init__(self, default_price: float | None = None, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_price = default_price if default_price is not None else settings.default_ticket_price
        self._clock = clock
        self._assignments: dict[str, Assignment] = {}
        self.date: date | None = None
        self.revision = 0
        self.last_edit_at: float | None = None

    def __len__(self) -> int:
        return len(self._assignments)

    def __contains__(self, time_slot_id: Any) -> bool:
        return slot_key(time_slot_id) in self._assignments

    def __iter__(self) -> Iterator[Assignment]:
        return iter(self._assignments.values())

    def items(self) -> list[tuple[str, Assignment]]:
        return list(self._assignments.items())

    def get(self, time_slot_id: Any) -> Assignment | None:
        return self._assignments.get(slot_key(time_slot_id))

    def blank(self, time_slot_id: Any) -> Assignment:
        """Empty assignment showing the fallback price as a visible default."""
        return Assignment(time_slot_id=time_slot_id, price=self.default_price, price_is_default=True)

    def _touch(self) -> None:
        self.revision += 1
        self.last_edit_at = self._clock()

    # -- operator edits ---------------------------------------------------

    def assign(
        self,
        time_slot_id: Any,
        movie_id: Any,
        movie_title: str | None = None,
        price: float | None = None,
    ) -> Assignment:
        """Put a movie in a slot. Keeps the slot's current price unless one is given."""
        data = (self.get(time_slot_id) or self.blank(time_slot_id)).model_dump()
        data.update(movie_id=movie_id, movie_title=movie_title)
        if price is not None:
            data.update(price=price, price_is_default=False)
        elif data["price"] is None:
            data.update(price=self.default_price, price_is_default=True)
        updated = Assignment.model_validate(data)
        self._assignments[slot_key(time_slot_id)] = updated
        self._touch()
        return updated

    def set_price(self, time_slot_id: Any, price: float | None) -> Assignment:
        """Set the slot's price. None leaves it unset, which blocks saving an assigned slot."""
        current = self.get(time_slot_id) or self.blank(time_slot_id)
        updated = Assignment.model_validate({**current.model_dump(), "price": price, "price_is_default": False})
        self._assignments[slot_key(time_slot_id)] = updated
        self._touch()
        return updated

    def clear(self, time_slot_id: Any) -> Assignment | None:
        """
        Remove the movie from a slot. A persisted slot keeps its record id and becomes a
        pending delete; an unsaved one just goes back to blank.
        """
        current = self.get(time_slot_id)
        if current is None:
            return None
        if current.planner_record_id is None:
            updated = self.blank(current.time_slot_id)
        else:
            updated = current.model_copy(update={"movie_id": None, "movie_title": None})
        self._assignments[slot_key(time_slot_id)] = updated
        self._touch()
        return updated

    # -- loader writes ----------------------------------------------------

    def replace(self, day: date, assignments: Iterable[Assignment]) -> None:
        """Swap in a freshly loaded state wholesale. Never merges with what was there."""
        self.date = day
        self._assignments = {slot_key(a.time_slot_id): a for a in assignments}
        logger.debug("Desired state for %s replaced: %s slots", day, len(self._assignments))

    def reset(self, day: date, active_slots: Iterable[TimeSlot]) -> None:
        """Unsynced state: every active slot blank at the default price."""
        self.replace(day, (self.blank(s.id) for s in active_slots))

    # -- reads for the engine --------------------------------------------

    def pending(self) -> list[Assignment]:
        return [a for a in self._assignments.values() if a.operation is not Operation.NOOP]

    def snapshot(self) -> dict[str, list[list[Any]]]:
        """Deterministic view of assignments and prices, used for the resubmission fingerprint."""
        keys = sorted(self._assignments)
        return {
            "assignments": [
                [k, self._assignments[k].movie_id, self._assignments[k].planner_record_id] for k in keys
            ],
            "prices": [[k, self._assignments[k].price] for k in keys],
        }
