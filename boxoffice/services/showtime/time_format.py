"""
Show time normalization and chronological ordering.

The planner service returns show times in several shapes: "2025-08-14 14:30:00",
"14:30:00", "14:30", "2:30 PM", "2:30pm". Everything that displays, keys or sorts a
show time goes through normalize() so it works on one canonical "h:mm A" string.

Best effort only: nothing here raises on bad input. An unparseable value comes back
cleaned but otherwise unchanged, and compare() falls back to plain string order.
"""
import re
from datetime import date, datetime, time, timedelta
from functools import cmp_to_key
from typing import Any, Iterable

from boxoffice.core.constants import MISSING_TIME_LABEL, SHOW_PAST_BUFFER_MINUTES

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:T|\s+)")
# Fractional seconds and zone suffix left over from ISO datetimes ("14:30:00.000Z", "14:30Z").
# Only after a colon time, so the minutes of "18.30" are not read as a fraction.
_ZONE_SUFFIX_RE = re.compile(
    r"(?:(?<=\d:\d{2}:\d{2})(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?|(?<=\d:\d{2})(?:Z|[+-]\d{2}:?\d{2}))$"
)
# "6:00pm", "6:00 p.m.", "6:00PM" -> "6:00 PM"
_MERIDIEM_RE = re.compile(r"(?<=\d)\s*([ap])\.?\s*m\.?$", re.IGNORECASE)
# "2:5 PM" -> "2:05 PM"
_SHORT_MINUTE_RE = re.compile(r"^(\d{1,2}):(\d)(?!\d)")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")

_STRICT_12H = ("%I:%M %p",)  # hh:mm A / h:mm A
_STRICT_24H = ("%H:%M:%S", "%H:%M")
_LENIENT = ("%I:%M:%S %p", "%I %p", "%I:%M%p", "%I.%M %p", "%H.%M", "%H:%M:%S.%f")


def _clean(raw: str) -> str:
    s = " ".join(raw.split())
    s = _DATE_PREFIX_RE.sub("", s)
    s = _ZONE_SUFFIX_RE.sub("", s)
    s = _MERIDIEM_RE.sub(lambda m: " " + m.group(1).upper() + "M", s)
    return _SHORT_MINUTE_RE.sub(r"\1:0\2", s)


def _parse(value: str, formats: Iterable[str]) -> time | None:
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    return None


def _parse_lenient(cleaned: str, raw: str) -> time | None:
    parsed = _parse(cleaned, _LENIENT)
    if parsed is not None:
        return parsed
    # Military style "1830" / "930"
    if cleaned.isdigit() and len(cleaned) in (3, 4):
        parsed = _parse(cleaned.zfill(4), ("%H%M",))
        if parsed is not None:
            return parsed
    if ":" not in raw:
        return None
    try:
        return datetime.fromisoformat(raw.strip()).time()
    except ValueError:
        return None


def _format_12h(t: time) -> str:
    meridiem = "AM" if t.hour < 12 else "PM"
    return f"{t.hour % 12 or 12}:{t.minute:02d} {meridiem}"


def normalize(raw: Any) -> str:
    """
    Canonical "h:mm A" display string for a show time value.

    Tries strict 12-hour, then 24-hour, then a lenient pass. If none of them parse,
    returns the cleaned string as-is; callers must treat the result as best effort.
    """
    if raw is None:
        return MISSING_TIME_LABEL
    if isinstance(raw, datetime):
        return _format_12h(raw.time())
    if isinstance(raw, time):
        return _format_12h(raw)
    raw_str = str(raw)
    cleaned = _clean(raw_str)
    if not cleaned:
        return MISSING_TIME_LABEL
    parsed = _parse(cleaned, _STRICT_12H) or _parse(cleaned, _STRICT_24H) or _parse_lenient(cleaned, raw_str)
    if parsed is None:
        return cleaned
    return _format_12h(parsed)


def parse_display_time(value: Any) -> time | None:
    """Strict "hh:mm A" parse. None when the value is not a canonical display time."""
    if value is None:
        return None
    return _parse(str(value).strip(), _STRICT_12H)


def compare(a: Any, b: Any) -> int:
    """
    Order two display times: -1, 0 or 1.

    Chronological (same day) when both parse as "hh:mm A"; otherwise plain string
    comparison, so the result is always deterministic even for garbage input.
    """
    ta = parse_display_time(a)
    tb = parse_display_time(b)
    if ta is not None and tb is not None:
        return (ta > tb) - (ta < tb)
    sa = "" if a is None else str(a)
    sb = "" if b is None else str(b)
    return (sa > sb) - (sa < sb)


show_time_sort_key = cmp_to_key(compare)


def sort_show_times(values: Iterable[Any]) -> list[str]:
    """Normalize each value and return them earliest first."""
    return sorted((normalize(v) for v in values), key=show_time_sort_key)


def normalize_show_date(value: Any) -> date | None:
    """YYYY-MM-DD, DD-MM-YYYY, MM-DD-YYYY or ISO datetime -> date. None if it cannot be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    try:
        if _ISO_DATE_RE.match(s):
            return date.fromisoformat(s)
        if _DMY_DATE_RE.match(s):
            for fmt in ("%d-%m-%Y", "%m-%d-%Y"):
                try:
                    return datetime.strptime(s, fmt).date()
                except ValueError:
                    continue
            return None
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def midnight_utc(day: date) -> str:
    """Wire form of a calendar day for the planner service: midnight UTC timestamp."""
    return f"{day.isoformat()}T00:00:00.000Z"


def show_start(show_date: Any, time_value: Any) -> datetime | None:
    """Naive local datetime the show starts at, or None if date or time cannot be read."""
    day = normalize_show_date(show_date)
    if day is None:
        return None
    t = parse_display_time(normalize(time_value))
    if t is None:
        return None
    return datetime.combine(day, t)


def is_time_in_past(
    show_date: Any,
    time_value: Any,
    now: datetime | None = None,
    buffer: timedelta = timedelta(minutes=SHOW_PAST_BUFFER_MINUTES),
) -> bool:
    """
    True once a show can no longer be sold: any day before today, or today once
    now is past the start plus the buffer. Unreadable input is allowed (False).
    """
    day = normalize_show_date(show_date)
    if day is None or not time_value:
        return False
    now = now or datetime.now()
    if day < now.date():
        return True
    if day > now.date():
        return False
    start = show_start(day, time_value)
    if start is None:
        return False
    return now > start + buffer


def is_time_disabled_for_snacks(
    timings: Iterable[Any],
    show_time: Any,
    show_date: Any,
    now: datetime | None = None,
) -> bool:
    """
    Concession receipts for a show stay enabled until the next show after now starts.
    With no later show, they close one buffer after this show's own start.
    """
    this_show = show_start(show_date, show_time)
    if this_show is None:
        return False
    now = now or datetime.now()
    starts = sorted(s for s in (show_start(show_date, t) for t in timings or []) if s is not None)
    next_after_now = next((s for s in starts if s >= now), None)
    if next_after_now is not None:
        if now < next_after_now:
            return False
        return this_show < next_after_now
    return now > this_show + timedelta(minutes=SHOW_PAST_BUFFER_MINUTES)
