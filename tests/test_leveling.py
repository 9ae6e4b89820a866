"""Tests for levels and level progress."""
import pytest

from scoring.leveling import level, level_floor, level_progress


@pytest.mark.parametrize("total,expected", [(0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (900, 4), (1600, 5)])
def test_level_boundaries(total, expected):
    assert level(total) == expected


def test_negative_totals_stay_on_level_one():
    assert level(-250) == 1
    assert level_progress(-250) == 0


def test_level_floor():
    assert level_floor(1) == 0
    assert level_floor(2) == 100
    assert level_floor(5) == 1600


@pytest.mark.parametrize("total,expected", [(0, 0), (50, 50), (100, 0), (250, 50), (400, 0)])
def test_progress(total, expected):
    assert level_progress(total) == pytest.approx(expected)


def test_progress_stays_in_range_for_large_totals():
    total = 0.0
    while total < 1e12:
        progress = level_progress(total)
        assert 0 <= progress < 100
        total = total * 3 + 7


def test_level_never_decreases():
    previous = 0
    for total in range(0, 5000, 17):
        assert level(total) >= previous
        previous = level(total)
