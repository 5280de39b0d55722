"""
Shared fixtures: an in-memory planner service behind httpx.MockTransport.

FakePlanner answers the primary path conventions by default; tests move the
accepted routes around or inject failures to exercise the fallback and error paths.
"""
import asyncio
import json
from datetime import date

import httpx
import pytest

from boxoffice.services.planner import PlannerClient, PlannerConfig
from boxoffice.services.showtime import ScheduleSession

BASE_URL = "http://planner.test/api"
DAY = date(2025, 8, 14)
DAY_WIRE = "2025-08-14T00:00:00.000Z"

SLOTS = [
    {"id": 1, "showTime": "10:30:00", "active": True},
    {"id": 2, "showTime": "2025-08-14 14:30:00", "active": True},
    {"id": 3, "showTime": "6:00 PM", "active": True},
    {"id": 4, "showTime": "21:15", "active": False},
]

TITLES = {7: "Dune", 8: "The Batman", 9: "Spider-Man: No Way Home"}


def planner_row(record_id, slot_id, movie_id, price=150.0, day=DAY_WIRE, active=True):
    return {
        "id": record_id,
        "showTimeId": slot_id,
        "movieId": movie_id,
        "date": day,
        "price": price,
        "active": active,
    }


class FakePlanner:
    def __init__(self, slots=None, records=None):
        self.slots = [dict(s) for s in (slots if slots is not None else SLOTS)]
        self.records = {r["id"]: dict(r) for r in (records or [])}
        self.calls: list[tuple[str, str]] = []
        self.bodies: list[tuple[str, str, object]] = []
        self.next_id = 100
        self.create_paths = {"/show-time-planner/bulk"}
        self.update_routes = {("PUT", "/show-time-planner")}
        self.delete_routes = {("DELETE", "/show-time-planner")}
        self.fail: dict[tuple[str, str], int] = {}
        self.list_status = 200
        self.gate: asyncio.Event | None = None
        # Per-day gates on the list-by-date read, keyed "YYYY-MM-DD"
        self.list_gates: dict[str, asyncio.Event] = {}

    def writes(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] != "GET"]

    def _expand(self, rec: dict) -> dict:
        slot = next((s for s in self.slots if s["id"] == rec["showTimeId"]), None)
        movie_id = rec.get("movieId")
        out = dict(rec)
        out["movie"] = {"id": movie_id, "movieName": TITLES.get(movie_id, f"Movie {movie_id}")} if movie_id else None
        out["showTime"] = dict(slot) if slot else None
        return out

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if self.gate is not None and request.method != "GET":
            await self.gate.wait()
        day_gate = self.list_gates.get(request.url.path.rsplit("/", 1)[1])
        if day_gate is not None and request.method == "GET":
            await day_gate.wait()
        return self._handle(request)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api")
        self.calls.append((method, path))
        body = json.loads(request.content) if request.content else None
        if body is not None:
            self.bodies.append((method, path, body))
        if (method, path) in self.fail:
            return httpx.Response(self.fail[(method, path)], json={"message": "failure"})

        if method == "GET" and path == "/show-times":
            return httpx.Response(200, json=self.slots)
        if method == "GET" and path.startswith("/show-time-planner/date/"):
            if self.list_status != 200:
                return httpx.Response(self.list_status, json={"message": "unavailable"})
            day = path.rsplit("/", 1)[1]
            rows = [self._expand(r) for r in self.records.values() if str(r["date"]).startswith(day)]
            return httpx.Response(200, json=rows)
        if method == "POST" and path in self.create_paths:
            created = []
            for item in body:
                rec = {"id": self.next_id, "active": True, **item}
                self.next_id += 1
                self.records[rec["id"]] = rec
                created.append(rec)
            return httpx.Response(201, json=created)

        prefix, _, rid = path.rpartition("/")
        if (method, prefix) in self.update_routes:
            rec = self.records.get(int(rid))
            if rec is None:
                return httpx.Response(404, json={"message": "not found"})
            rec.update(body)
            return httpx.Response(200, json=rec)
        if (method, prefix) in self.delete_routes:
            if self.records.pop(int(rid), None) is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(204)
        return httpx.Response(404, json={"message": "no route"})


@pytest.fixture
def fake_planner():
    return FakePlanner()


def make_client(fake: FakePlanner, *, endpoint_fallback: bool = True) -> PlannerClient:
    config = PlannerConfig(base_url=BASE_URL, token="test-token", timeout=5.0, endpoint_fallback=endpoint_fallback)
    return PlannerClient(config, transport=httpx.MockTransport(fake.handler))


@pytest.fixture
def planner_client(fake_planner):
    return make_client(fake_planner)


@pytest.fixture
def session(planner_client):
    return ScheduleSession(
        planner_client,
        default_price=150.0,
        debounce_seconds=0.0,
        submit_timeout_seconds=5.0,
    )
