"""Remote show-time planner service: slot catalog and planner record reads/writes."""
from boxoffice.services.planner.client import PlannerClient
from boxoffice.services.planner.config import PlannerConfig
from boxoffice.services.planner.types import (
    PlannerMovieRow,
    PlannerRecordRow,
    PlannerWritePayload,
    ShowTimeRow,
)

__all__ = [
    "PlannerClient",
    "PlannerConfig",
    "PlannerMovieRow",
    "PlannerRecordRow",
    "PlannerWritePayload",
    "ShowTimeRow",
]
