"""Planner service client: lowest level, sends requests and classifies HTTP outcomes. No schedule logic."""
import logging
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx

from boxoffice.core.constants import (
    ENDPOINT_SHAPE_STATUSES,
    PLANNER_BY_DATE_PATH,
    PLANNER_CREATE_PATHS,
    PLANNER_DELETE_PATHS,
    PLANNER_UPDATE_PATHS,
    SHOW_TIMES_PATH,
    STATUS_NOT_FOUND,
)
from boxoffice.core.errors import EndpointShapeError, RemoteServiceError
from boxoffice.services.planner.config import PlannerConfig
from boxoffice.services.planner.types import PlannerRecordRow, PlannerWritePayload, ShowTimeRow

logger = logging.getLogger(__name__)


def _unwrap_list(data: Any) -> list[dict[str, Any]]:
    """Service may return a bare list or wrap it ({"data": [...]}, {"items": [...]})."""
    if isinstance(data, list):
        return [d for d in data if isinstance(d, dict)]
    if isinstance(data, dict):
        for key in ("data", "items", "results"):
            inner = data.get(key)
            if isinstance(inner, list):
                return [d for d in inner if isinstance(d, dict)]
    return []


class PlannerClient:
    """Show-time slots and planner records on the remote scheduling service."""

    def __init__(self, config: PlannerConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config or PlannerConfig()
        self._transport = transport

    @property
    def config(self) -> PlannerConfig:
        return self._config

    async def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json_body: Any = None,
    ) -> httpx.Response:
        url = f"{self._config.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport) as c:
                r = await c.request(method, url, json=json_body, headers=self._config.headers())
        except httpx.HTTPError as e:
            raise RemoteServiceError(
                f"Planner service unreachable: {e}", operation=operation, path=path
            ) from e
        logger.debug("Planner %s %s -> %s", method, path, r.status_code)
        return r

    @staticmethod
    def _error(r: httpx.Response, *, operation: str, path: str) -> RemoteServiceError:
        return RemoteServiceError(
            f"Planner API error: {r.status_code}",
            operation=operation,
            status_code=r.status_code,
            path=path,
            detail=(r.text[:500] if r.text else None),
        )

    @staticmethod
    def _json(r: httpx.Response, *, operation: str, path: str) -> Any:
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise RemoteServiceError(
                "Planner service returned invalid JSON", operation=operation, path=path, detail=r.text[:500]
            ) from e

    def _conventions(self, conventions: list[tuple[str, str]]) -> list[tuple[str, str]]:
        return conventions if self._config.endpoint_fallback else conventions[:1]

    async def _write(
        self,
        operation: str,
        conventions: list[tuple[str, str]],
        *,
        record_id: Any = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """
        Send one write, walking the path conventions in order. 404/405 moves on to the
        next convention with the same payload; any other failure raises at once.
        """
        attempted: list[str] = []
        statuses: list[int] = []
        rid = quote(str(record_id), safe="") if record_id is not None else ""
        for method, template in self._conventions(conventions):
            path = template.format(record_id=rid)
            r = await self._send(method, path, operation=operation, json_body=json_body)
            attempted.append(f"{method} {path}")
            if r.is_success:
                if len(attempted) > 1:
                    logger.info("Planner %s accepted on fallback %s %s", operation, method, path)
                return r
            if r.status_code in ENDPOINT_SHAPE_STATUSES:
                statuses.append(r.status_code)
                logger.debug("Planner %s: %s %s answered %s", operation, method, path, r.status_code)
                continue
            raise self._error(r, operation=operation, path=path)
        raise EndpointShapeError(
            f"Planner {operation}: no path convention accepted the request ({', '.join(attempted)})",
            operation=operation,
            attempted_paths=attempted,
            statuses=statuses,
        )

    async def list_show_times(self) -> list[ShowTimeRow]:
        """All slot definitions for the venue (active and inactive)."""
        path = SHOW_TIMES_PATH
        r = await self._send("GET", path, operation="list_show_times")
        if not r.is_success:
            raise self._error(r, operation="list_show_times", path=path)
        return _unwrap_list(self._json(r, operation="list_show_times", path=path))

    async def list_planner_records(self, day: date) -> list[PlannerRecordRow]:
        """Planner records for one calendar day. 404 means nothing is planned for that day."""
        path = PLANNER_BY_DATE_PATH.format(date=day.isoformat())
        r = await self._send("GET", path, operation="list_planner_records")
        if r.status_code == STATUS_NOT_FOUND:
            return []
        if not r.is_success:
            raise self._error(r, operation="list_planner_records", path=path)
        return _unwrap_list(self._json(r, operation="list_planner_records", path=path))

    async def create_planner_records(self, records: list[PlannerWritePayload]) -> list[PlannerRecordRow]:
        """Create all new records for a date in one call. Returns created rows when the service echoes them."""
        if not records:
            return []
        r = await self._write("create", PLANNER_CREATE_PATHS, json_body=records)
        data = self._json(r, operation="create", path=str(r.request.url.path))
        if isinstance(data, dict) and "id" in data:
            return [data]
        return _unwrap_list(data)

    async def update_planner_record(self, record_id: Any, payload: PlannerWritePayload) -> dict[str, Any]:
        r = await self._write("update", PLANNER_UPDATE_PATHS, record_id=record_id, json_body=payload)
        data = self._json(r, operation="update", path=str(r.request.url.path))
        return data if isinstance(data, dict) else {}

    async def delete_planner_record(self, record_id: Any) -> bool:
        """Delete one record. True if deleted, False if the service no longer had it (still a success)."""
        try:
            await self._write("delete", PLANNER_DELETE_PATHS, record_id=record_id)
        except EndpointShapeError as e:
            if STATUS_NOT_FOUND in e.statuses:
                logger.info("Planner record %s already gone (%s)", record_id, ", ".join(e.attempted_paths))
                return False
            raise
        return True
