"""Tests for display formatting helpers."""
from datetime import datetime

import pytest

from scoring.formatting import (
    format_carbon_footprint,
    format_date,
    format_datetime,
    format_distance,
    format_duration,
    format_score,
    format_time,
    truncate_string,
)


@pytest.mark.parametrize(
    "score,expected",
    [(42, "42"), (41.6, "42"), (999, "999"), (1000, "1.0K"), (1500, "1.5K"), (2500000, "2.5M"), (0, "0")],
)
def test_format_score(score, expected):
    assert format_score(score) == expected


@pytest.mark.parametrize("minutes,expected", [(0, "0 min"), (45, "45 min"), (60, "1h 0min"), (90, "1h 30min"), (-30, "-30 min")])
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


@pytest.mark.parametrize("km,expected", [(0.5, "500m"), (0.9996, "1000m"), (1, "1.0km"), (12.34, "12.3km")])
def test_format_distance(km, expected):
    assert format_distance(km) == expected


@pytest.mark.parametrize("kg,expected", [(0.25, "250g"), (0, "0g"), (3, "3.0kg"), (12.3, "12.3kg")])
def test_format_carbon_footprint(kg, expected):
    assert format_carbon_footprint(kg) == expected


def test_dates_and_times():
    moment = datetime(2025, 3, 4, 9, 5)
    assert format_date(moment) == "March 4, 2025"
    assert format_time(moment) == "09:05 AM"
    assert format_time(datetime(2025, 3, 4, 13, 30)) == "01:30 PM"
    assert format_time(datetime(2025, 3, 4, 0, 15)) == "12:15 AM"
    assert format_datetime(moment) == "March 4, 2025 at 09:05 AM"


def test_truncate_string():
    assert truncate_string("short") == "short"
    assert truncate_string("a" * 60, 50) == "a" * 50 + "..."
