from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in ``tz_name`` as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def to_day(value: date | datetime) -> date:
    """Drop any time-of-day component so dates compare at day granularity."""
    if isinstance(value, datetime):
        return value.date()
    return value
