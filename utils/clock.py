# utils/clock.py
from datetime import datetime, timedelta, timezone
from typing import Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def day_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `moment`."""
    start = datetime(moment.year, moment.month, moment.day)
    return start, start + timedelta(days=1)
