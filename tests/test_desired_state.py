from conftest import DAY

from boxoffice.services.showtime.desired_state import DesiredStateStore
from boxoffice.services.showtime.models import Assignment, Operation, TimeSlot

SLOTS = [TimeSlot(id=1, showTime="10:30:00"), TimeSlot(id=2, showTime="14:30")]


def _store() -> DesiredStateStore:
    ticks = iter(range(1, 1000))
    store = DesiredStateStore(150.0, clock=lambda: float(next(ticks)))
    store.reset(DAY, SLOTS)
    return store


def test_reset_gives_every_active_slot_the_visible_default_price():
    store = _store()
    assert len(store) == 2
    for a in store:
        assert a.price == 150.0
        assert a.price_is_default is True
        assert a.operation is Operation.NOOP
    assert store.revision == 0


def test_assign_keeps_default_price_and_marks_create():
    store = _store()
    a = store.assign(1, 7, "Dune")
    assert a.operation is Operation.CREATE
    assert a.price == 150.0
    assert a.price_is_default is True
    assert store.revision == 1
    assert store.last_edit_at == 1.0


def test_assign_with_price_overrides_default():
    store = _store()
    a = store.assign("1", 7, "Dune", 200)
    assert a.price == 200.0
    assert a.price_is_default is False
    # String and int slot ids address the same slot
    assert store.get(1) is store.get("1")


def test_set_price_none_leaves_price_unset():
    store = _store()
    store.assign(1, 7)
    a = store.set_price(1, None)
    assert a.price is None
    assert a.movie_id == 7


def test_clear_unsaved_slot_goes_back_to_blank():
    store = _store()
    store.assign(1, 7, "Dune", 180)
    a = store.clear(1)
    assert a.operation is Operation.NOOP
    assert a.planner_record_id is None
    assert a.price == 150.0


def test_clear_persisted_slot_becomes_pending_delete():
    store = _store()
    store.replace(DAY, [Assignment(time_slot_id=1, movie_id=7, planner_record_id=55, price=150)])
    a = store.clear(1)
    assert a.operation is Operation.DELETE
    assert a.planner_record_id == 55
    assert a.movie_id is None


def test_clear_unknown_slot_is_noop():
    store = _store()
    assert store.clear(99) is None
    assert store.revision == 0


def test_replace_does_not_count_as_an_edit():
    store = _store()
    store.assign(1, 7)
    revision = store.revision
    store.replace(DAY, [Assignment(time_slot_id=1, movie_id=7, planner_record_id=100, price=150)])
    assert store.revision == revision
    assert store.get(2) is None


def test_snapshot_is_order_independent():
    a = _store()
    a.assign(2, 8, price=120)
    a.assign(1, 7, price=100)
    b = _store()
    b.assign(1, 7, price=100)
    b.assign(2, 8, price=120)
    assert a.snapshot() == b.snapshot()


def test_blank_strings_become_none():
    a = Assignment(time_slot_id=1, movie_id="", planner_record_id="  ", price="")
    assert a.movie_id is None
    assert a.planner_record_id is None
    assert a.price is None
