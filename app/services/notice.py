"""Notice-period classification for stints.

The fee calculator takes urgency as an input; this is where callers turn a
shift start time into one. ``now`` is always passed in by the caller.
"""

from datetime import datetime, timezone

from app.services.fee import Urgency

URGENT_NOTICE_HOURS = 24


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_until(shift_start: datetime, now: datetime) -> float:
    """Hours of notice before ``shift_start``; negative once the shift has started."""
    return (as_utc(shift_start) - as_utc(now)).total_seconds() / 3600


def determine_urgency(
    shift_start: datetime,
    now: datetime,
    urgent_notice_hours: int = URGENT_NOTICE_HOURS,
) -> Urgency:
    if hours_until(shift_start, now) < urgent_notice_hours:
        return Urgency.URGENT
    return Urgency.NORMAL
