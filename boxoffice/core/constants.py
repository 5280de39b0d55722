"""
Centralized constants for the planner client and schedule sync (Encapsulate What Changes).

Change path conventions or buffers here instead of scattering literals across services and routes.
Prices, timeouts and the debounce come from config (env-driven).
"""

# Remote planner service paths. Reads are pinned; each write lists its primary
# convention first, then the alternates tried on 404/405 (at most two).
SHOW_TIMES_PATH = "/show-times"
PLANNER_BY_DATE_PATH = "/show-time-planner/date/{date}"

PLANNER_CREATE_PATHS: list[tuple[str, str]] = [
    ("POST", "/show-time-planner/bulk"),
    ("POST", "/show-time-planner/batch"),
    ("POST", "/show-time-planner"),
]
PLANNER_UPDATE_PATHS: list[tuple[str, str]] = [
    ("PUT", "/show-time-planner/{record_id}"),
    ("PATCH", "/show-time-planner/{record_id}"),
    ("PUT", "/show-time-planners/{record_id}"),
]
PLANNER_DELETE_PATHS: list[tuple[str, str]] = [
    ("DELETE", "/show-time-planner/{record_id}"),
    ("DELETE", "/show-time-planners/{record_id}"),
    ("DELETE", "/show-time-planner/delete/{record_id}"),
]

# Status codes that mean "wrong path shape", not "request rejected"
ENDPOINT_SHAPE_STATUSES = frozenset({404, 405})
STATUS_NOT_FOUND = 404

# Canonical show time display format (e.g. "2:30 PM") and placeholder for missing times
DISPLAY_TIME_FORMAT = "h:mm A"
MISSING_TIME_LABEL = "N/A"

# A show is treated as started/past this long after its start time (ticket sales, snacks)
SHOW_PAST_BUFFER_MINUTES = 60

# Submission outcomes reported to the caller
STATUS_SYNCED = "synced"
STATUS_NO_CHANGES = "no_changes"
