import pytest
from conftest import FakePlanner, make_client, planner_row
from fastapi import FastAPI
from fastapi.testclient import TestClient

from boxoffice.api.routes import schedule
from boxoffice.services.showtime import ScheduleSession


@pytest.fixture
def api_fake():
    return FakePlanner(records=[planner_row(55, 1, 7)])


@pytest.fixture
def api(api_fake):
    app = FastAPI()
    app.include_router(schedule.router, prefix="/schedule")
    app.state.schedule_session = ScheduleSession(
        make_client(api_fake), default_price=150.0, debounce_seconds=0.0, submit_timeout_seconds=5.0
    )
    return TestClient(app)


def test_session_missing_returns_503():
    app = FastAPI()
    app.include_router(schedule.router, prefix="/schedule")
    r = TestClient(app).get("/schedule/slots")
    assert r.status_code == 503


def test_get_schedule(api):
    r = api.get("/schedule/2025-08-14")
    assert r.status_code == 200
    data = r.json()
    assert data["synced"] is True
    assert data["default_price"] == 150.0
    assert [s["display_time"] for s in data["slots"]] == ["10:30 AM", "2:30 PM", "6:00 PM"]
    assert data["slots"][0]["planner_record_id"] == 55
    assert data["slots"][0]["movie_title"] == "Dune"


def test_slot_catalog(api):
    api.get("/schedule/2025-08-14")
    r = api.get("/schedule/slots")
    assert r.status_code == 200
    assert [(s["id"], s["active"]) for s in r.json()] == [(1, True), (2, True), (3, True), (4, False)]


def test_edit_preview_and_submit(api, api_fake):
    r = api.put("/schedule/2025-08-14/slots/2", json={"movie_id": 8, "price": 220})
    assert r.status_code == 200
    assert r.json()["pending"] == "create"
    assert r.json()["price"] == 220.0

    r = api.delete("/schedule/2025-08-14/slots/1")
    assert r.json()["pending"] == "delete"

    plan = api.get("/schedule/2025-08-14/plan").json()
    assert [op["movie_id"] for op in plan["creates"]] == [8]
    assert [op["planner_record_id"] for op in plan["deletes"]] == [55]

    r = api.post("/schedule/2025-08-14/submit")
    assert r.status_code == 200
    assert r.json()["status"] == "synced"
    assert (r.json()["created"], r.json()["deleted"]) == (1, 1)
    assert 55 not in api_fake.records

    r = api.post("/schedule/2025-08-14/submit")
    assert r.json()["status"] == "no_changes"


def test_price_only_update(api):
    r = api.put("/schedule/2025-08-14/slots/1", json={"price": 175})
    assert r.status_code == 200
    assert r.json()["movie_id"] == 7
    assert r.json()["price"] == 175.0
    assert r.json()["pending"] == "update"


def test_missing_price_is_422(api):
    api.put("/schedule/2025-08-14/slots/3", json={"movie_id": 9})
    api.put("/schedule/2025-08-14/slots/3", json={"price": None})
    r = api.post("/schedule/2025-08-14/submit")
    assert r.status_code == 422
    assert "6:00 PM" in r.json()["detail"]


def test_assign_with_null_price_leaves_price_unset(api):
    r = api.put("/schedule/2025-08-14/slots/2", json={"movie_id": 8, "price": None})
    assert r.status_code == 200
    assert r.json()["movie_id"] == 8
    assert r.json()["price"] is None
    assert r.json()["pending"] == "create"
    r = api.post("/schedule/2025-08-14/submit")
    assert r.status_code == 422
    assert "2:30 PM" in r.json()["detail"]


def test_assign_without_price_keeps_default(api):
    r = api.put("/schedule/2025-08-14/slots/2", json={"movie_id": 8})
    assert r.json()["price"] == 150.0
    assert r.json()["price_is_default"] is True


def test_unknown_slot_is_404(api):
    assert api.put("/schedule/2025-08-14/slots/99", json={"movie_id": 7}).status_code == 404
    assert api.delete("/schedule/2025-08-14/slots/99").status_code == 404


def test_inactive_slot_cannot_be_scheduled(api):
    r = api.put("/schedule/2025-08-14/slots/4", json={"movie_id": 7})
    assert r.status_code == 422


def test_submit_failure_is_502(api, api_fake):
    api_fake.fail[("PUT", "/show-time-planner/55")] = 500
    api.put("/schedule/2025-08-14/slots/1", json={"price": 175})
    r = api.post("/schedule/2025-08-14/submit")
    assert r.status_code == 502


def test_timings(api, api_fake):
    api_fake.records[56] = planner_row(56, 3, 8)
    api_fake.records[57] = planner_row(57, 2, 9)
    r = api.get("/schedule/2025-08-14/timings")
    assert r.status_code == 200
    assert r.json()["timings"] == ["10:30 AM", "2:30 PM", "6:00 PM"]
    assert r.json()["shows"][1]["movie_title"] == "Spider-Man: No Way Home"
    # The fixture day is long gone: every show is past and closed for concessions
    assert all(s["past"] and s["snacks_disabled"] for s in r.json()["shows"])
    assert r.json()["available_timings"] == []


def test_timings_for_a_future_day_are_open(api, api_fake):
    api_fake.records[70] = planner_row(70, 3, 8, day="2999-01-01T00:00:00.000Z")
    r = api.get("/schedule/2999-01-01/timings")
    assert r.json()["available_timings"] == ["6:00 PM"]
    assert r.json()["shows"][0]["past"] is False
    assert r.json()["shows"][0]["snacks_disabled"] is False
