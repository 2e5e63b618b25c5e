"""Store-local wall clock helpers.

Meal session times, ordering cutoffs and deduction dates are all expressed
in the canteen's local time (``settings.timezone``). Timestamps are stored
in UTC; naive values read back from SQLite are treated as UTC.
"""

from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from canteen.core.config import settings


@lru_cache
def store_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def local_now() -> datetime:
    """Current time in the store timezone."""
    return datetime.now(store_tz())


def local_today() -> date:
    return local_now().date()


def to_local(value: datetime) -> datetime:
    """Convert a stored timestamp to store-local time."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(store_tz())


def month_start(value: date) -> date:
    """First day of the month containing ``value``."""
    return value.replace(day=1)
