from datetime import date, datetime
from zoneinfo import ZoneInfo

# Zero-padded 24-hour wall clock, so lexical order equals time order.
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(value: int) -> str:
    return f"{value // 60:02d}:{value % 60:02d}"


def to_day(value: date | datetime, tz: str = "UTC") -> date:
    """Pin a date or timestamp to a single calendar day.

    Aware timestamps are converted to the canonical zone first, naive
    ones are taken as already being wall-clock time in that zone.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(tz))
        return value.date()
    return value
