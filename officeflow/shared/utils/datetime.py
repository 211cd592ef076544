"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, date, datetime, time

# Formats accepted for task deadlines, tried in order (naive values are UTC).
_DEADLINE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    # Aware datetime - convert to UTC
    return dt.astimezone(UTC)


def parse_deadline(raw: str) -> datetime:
    """
    Parse a deadline string into a UTC-aware datetime.

    Accepts RFC 3339 / ISO-8601 with offset or "Z", ISO-8601 without offset,
    "YYYY-MM-DD HH:MM:SS" and date-only "YYYY-MM-DD" (midnight UTC).

    Args:
        raw: Client-supplied deadline text

    Returns:
        UTC-aware datetime

    Raises:
        ValueError: If raw matches none of the accepted formats
    """
    value = raw.strip()
    if not value:
        raise ValueError("empty deadline")
    try:
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in _DEADLINE_FORMATS:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    raise ValueError(f"unrecognized deadline format: {raw!r}")


def parse_range_bound(raw: str, *, end_of_day: bool) -> datetime:
    """
    Parse a query-string date bound.

    Date-only values expand to the start of the day (00:00:00) or, when
    end_of_day is set, to 23:59:59 of that day. Full datetimes are used
    as given.

    Raises:
        ValueError: If raw is not an ISO-8601 date or datetime
    """
    value = raw.strip()
    if len(value) == 10:
        day = date.fromisoformat(value)
        moment = time(23, 59, 59) if end_of_day else time(0, 0, 0)
        return datetime.combine(day, moment, tzinfo=UTC)
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
