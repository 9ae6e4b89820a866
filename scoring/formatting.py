# scoring/formatting.py
"""Display helpers. Fixed en-US style output, no locale lookups."""
import math
from datetime import datetime

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _int_string(value: float) -> str:
    return str(int(math.floor(value + 0.5)))


def format_score(score: float) -> str:
    if score >= 1_000_000:
        return f"{score / 1_000_000:.1f}M"
    if score >= 1_000:
        return f"{score / 1_000:.1f}K"
    return _int_string(score)


def format_duration(minutes: float) -> str:
    sign = "-" if minutes < 0 else ""
    total = int(math.floor(abs(minutes) + 0.5))
    hours, remaining = divmod(total, 60)
    if hours == 0:
        return f"{sign}{remaining} min"
    return f"{sign}{hours}h {remaining}min"


def format_distance(kilometers: float) -> str:
    if kilometers < 1:
        return f"{_int_string(kilometers * 1000)}m"
    return f"{kilometers:.1f}km"


def format_carbon_footprint(kilograms: float) -> str:
    if kilograms < 1:
        return f"{_int_string(kilograms * 1000)}g"
    return f"{kilograms:.1f}kg"


def format_date(value: datetime) -> str:
    # e.g. "March 4, 2025"
    return f"{MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_time(value: datetime) -> str:
    # e.g. "09:05 AM"
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour:02d}:{value.minute:02d} {suffix}"


def format_datetime(value: datetime) -> str:
    return f"{format_date(value)} at {format_time(value)}"


def truncate_string(value: str, max_length: int = 50) -> str:
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."
