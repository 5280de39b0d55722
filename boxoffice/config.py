"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env at the project root (parent of boxoffice/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # Remote show-time planner service: PLANNER_API_BASE_URL and PLANNER_API_TOKEN in .env
    planner_api_base_url: str = "http://localhost:5000/api"
    planner_api_token: str = ""
    planner_request_timeout_seconds: float = 10.0
    # Retry alternate path spellings on 404/405. Turn off once the upstream contract is pinned.
    planner_endpoint_fallback: bool = True

    # Shown to the operator as the default price for any slot without one
    default_ticket_price: float = 150.0
    # A submission that has not finished in this time fails instead of holding the guard
    submit_timeout_seconds: float = 60.0
    # Edits must be quiet this long before the "no changes" guard is dropped
    fingerprint_debounce_seconds: float = 0.5

    log_level: str = "INFO"
    cors_origins: str = ""

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("planner_api_base_url", "planner_api_token", mode="after")
    @classmethod
    def strip_planner(cls, v: str) -> str:
        return (v or "").strip()


settings = Settings()
