"""
Show time scheduling: time normalization, Desired-State store, planner sync loader
and the reconciliation engine that writes a date's schedule to the planner service.
"""
from boxoffice.services.showtime.desired_state import DesiredStateStore
from boxoffice.services.showtime.models import (
    Assignment,
    Operation,
    PlannedOperation,
    PlannerRecord,
    ReconciliationPlan,
    ShowOption,
    SubmissionResult,
    TimeSlot,
)
from boxoffice.services.showtime.reconcile import ReconciliationEngine, classify
from boxoffice.services.showtime.session import ScheduleSession
from boxoffice.services.showtime.sync_loader import PlannerSyncLoader, SyncStatus, list_show_options
from boxoffice.services.showtime.time_format import compare, normalize, sort_show_times

__all__ = [
    "Assignment",
    "DesiredStateStore",
    "Operation",
    "PlannedOperation",
    "PlannerRecord",
    "PlannerSyncLoader",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "ScheduleSession",
    "ShowOption",
    "SubmissionResult",
    "SyncStatus",
    "TimeSlot",
    "classify",
    "compare",
    "list_show_options",
    "normalize",
    "sort_show_times",
]
