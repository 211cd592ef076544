"""Deadline-derived remaining time and urgency (pure, no I/O)."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from officeflow.domain.enums import Urgency
from officeflow.shared.utils.datetime import ensure_utc

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)

NO_DEADLINE_TEXT = "no deadline"


@dataclass(frozen=True)
class RemainingTime:
    """Time left until a deadline.

    When overdue, days/hours/minutes carry the overdue magnitude as
    negative numbers.
    """

    text: str
    is_overdue: bool
    urgency: Urgency
    days: int = 0
    hours: int = 0
    minutes: int = 0


def _split(delta: timedelta) -> tuple[int, int, int]:
    """Return (whole days, remaining whole hours, remaining whole minutes) of a non-negative delta."""
    days, rest = divmod(delta, _DAY)
    hours, rest = divmod(rest, _HOUR)
    minutes = rest // _MINUTE
    return days, hours, minutes


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def compute_remaining_time(deadline: datetime | None, now: datetime) -> RemainingTime:
    """Bucket the time between now and deadline into text and urgency.

    Thresholds on whole remaining days: 7 or more is normal, 4-6 medium,
    2-3 high, exactly 1 urgent; under a day it is urgent while at least
    one whole hour remains, otherwise critical. A deadline equal to now
    is critical but not overdue.

    Args:
        deadline: Task deadline, or None.
        now: Reference time (aware or naive UTC).

    Returns:
        RemainingTime for display.
    """
    if deadline is None:
        return RemainingTime(text=NO_DEADLINE_TEXT, is_overdue=False, urgency=Urgency.NORMAL)

    diff = ensure_utc(deadline) - ensure_utc(now)

    if diff < timedelta(0):
        days, hours, minutes = _split(-diff)
        if days > 0:
            text = f"Overdue {_plural(days, 'day')}"
        elif hours > 0:
            text = f"Overdue {_plural(hours, 'hour')}"
        else:
            text = "Overdue"
        return RemainingTime(
            text=text,
            is_overdue=True,
            urgency=Urgency.CRITICAL,
            days=-days,
            hours=-hours,
            minutes=-minutes,
        )

    days, hours, minutes = _split(diff)
    if days >= 7:
        text, urgency = f"{_plural(days, 'day')} left", Urgency.NORMAL
    elif days > 3:
        text, urgency = f"{_plural(days, 'day')} left", Urgency.MEDIUM
    elif days > 1:
        text = f"{_plural(days, 'day')} {_plural(hours, 'hour')} left"
        urgency = Urgency.HIGH
    elif days == 1:
        text, urgency = f"1 day {_plural(hours, 'hour')} left", Urgency.URGENT
    elif hours > 0:
        text = f"{_plural(hours, 'hour')} {_plural(minutes, 'minute')} left"
        urgency = Urgency.URGENT
    else:
        text, urgency = f"{_plural(minutes, 'minute')} left", Urgency.CRITICAL

    return RemainingTime(
        text=text,
        is_overdue=False,
        urgency=urgency,
        days=days,
        hours=hours,
        minutes=minutes,
    )
