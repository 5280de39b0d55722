from boxoffice.services.planner import PlannerClient, PlannerConfig
from boxoffice.services.showtime import ScheduleSession

__all__ = ["PlannerClient", "PlannerConfig", "ScheduleSession"]
