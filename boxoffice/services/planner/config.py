"""Planner service config. Values from settings (PLANNER_API_BASE_URL, PLANNER_API_TOKEN) or PlannerClient args."""
from boxoffice.config import settings


class PlannerConfig:
    """Base URL, credentials and call behaviour for the remote show-time planner."""

    __slots__ = ("base_url", "token", "timeout", "endpoint_fallback")

    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        endpoint_fallback: bool | None = None,
    ) -> None:
        self.base_url = (base_url or settings.planner_api_base_url).strip().rstrip("/")
        self.token = (token if token is not None else settings.planner_api_token).strip()
        self.timeout = timeout if timeout is not None else settings.planner_request_timeout_seconds
        self.endpoint_fallback = (
            endpoint_fallback if endpoint_fallback is not None else settings.planner_endpoint_fallback
        )

    def is_configured(self) -> bool:
        return bool(self.base_url)

    def headers(self) -> dict[str, str]:
        h = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h
