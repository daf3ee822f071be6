"""
Time helpers for the triage board.

Timestamps are stored in UTC. Appointment times are plain times-of-day.
Wait times are rendered as short strings for the board.
"""

from datetime import date, datetime, time, timezone

MINUTES_PER_DAY = 24 * 60


def as_utc(dt: datetime) -> datetime:
    """Tz-aware UTC. Naive values are read as UTC (SQLite hands them back naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return utc_now().date()


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end, both coerced to UTC."""
    return (as_utc(end) - as_utc(start)).total_seconds() / 60


def add_minutes(t: time, minutes: int) -> time:
    """
    Shift a time-of-day by a number of minutes.
    Offsets that run past midnight wrap around the clock.
    """
    total = (t.hour * 60 + t.minute + minutes) % MINUTES_PER_DAY
    return time(total // 60, total % 60, t.second)


def format_wait_time(check_in_time: datetime | None, now: datetime | None = None) -> str:
    """
    Render a wait as "<m> mins" below an hour and "<h>h <m>m" otherwise.
    """
    if not check_in_time:
        return "Unknown"

    diff = int(minutes_between(check_in_time, now or utc_now()))
    if diff < 60:
        return f"{diff} mins"
    hours, mins = divmod(diff, 60)
    return f"{hours}h {mins}m"
