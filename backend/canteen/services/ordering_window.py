"""Ordering window evaluation for meal sessions.

All functions here are pure: they take a session and a wall-clock value and
never touch the database. Session times are store-local "HH:MM" strings (a
trailing ":SS" is ignored) or ``datetime.time`` values.

A session accepts orders from ``start_time`` up to and including
``end_time - order_cutoff_minutes_before``. A session whose cutoff falls
before its start is never open. Sessions that cross midnight are evaluated
as a plain same-day range; ``spans_midnight`` reports them.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Union

from canteen.core.exceptions import InvalidTimeFormat

ClockValue = Union[str, time, datetime]

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

ORDERING_CLOSED = "Ordering closed"


def parse_clock(value: ClockValue) -> int:
    """Minutes since local midnight for a time-of-day value.

    Raises:
        InvalidTimeFormat: if a string is not HH:MM[:SS] or is out of range.
    """
    if isinstance(value, datetime):
        return value.hour * 60 + value.minute
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)

    match = _TIME_RE.match(value.strip())
    if match is None:
        raise InvalidTimeFormat(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTimeFormat(value)
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    """Render minutes since midnight as HH:MM (negative values clamp to 00:00)."""
    minutes = max(0, minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _bounds(session) -> tuple:
    start = parse_clock(session.start_time)
    end = parse_clock(session.end_time)
    cutoff = end - (session.order_cutoff_minutes_before or 0)
    return start, cutoff


def is_ordering_active(session, now: ClockValue) -> bool:
    """True when ``now`` lies within [start, end - cutoff minutes], inclusive."""
    start, cutoff = _bounds(session)
    current = parse_clock(now)
    if cutoff < start:
        return False
    return start <= current <= cutoff


def minutes_until_cutoff(session, now: ClockValue) -> int:
    """Minutes left before the cutoff; 0 once it has passed."""
    _, cutoff = _bounds(session)
    return max(0, cutoff - parse_clock(now))


def format_remaining(minutes: int) -> str:
    if minutes <= 0:
        return ORDERING_CLOSED
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m remaining"
    return f"{mins}m remaining"


def spans_midnight(session) -> bool:
    """True when the session ends before it starts (not supported as a window)."""
    return parse_clock(session.end_time) < parse_clock(session.start_time)


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def can_schedule_advance(
    target_date: Union[date, datetime],
    today: Union[date, datetime],
    min_days: int,
) -> bool:
    """Whether ``target_date`` is at least ``min_days`` calendar days after ``today``.

    Both values are normalised to midnight first, so the time of day never
    matters.
    """
    diff = (_as_date(target_date) - _as_date(today)).days
    return diff >= min_days


def advance_deadline(target_date: Union[date, datetime], min_days: int) -> date:
    """Last day on which an advance order for ``target_date`` can be placed."""
    return _as_date(target_date) - timedelta(days=min_days)


def window_snapshot(session, now: ClockValue) -> Dict[str, Any]:
    """Current ordering state of a session, as shown to employees."""
    _, cutoff = _bounds(session)
    active = is_ordering_active(session, now)
    remaining = minutes_until_cutoff(session, now) if active else 0
    return {
        "session_id": getattr(session, "id", None),
        "is_active": active,
        "minutes_remaining": remaining,
        "label": format_remaining(remaining),
        "cutoff_time": format_clock(cutoff),
        "spans_midnight": spans_midnight(session),
    }
