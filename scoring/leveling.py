# scoring/leveling.py
import math

from config.points_config import POINTS_PER_LEVEL_UNIT


def level(total_score: float) -> int:
    """floor(sqrt(total / 100)) + 1; negative totals stay on level 1."""
    total = max(0.0, total_score)
    return int(math.floor(math.sqrt(total / POINTS_PER_LEVEL_UNIT))) + 1


def level_floor(lvl: int) -> float:
    """Minimum total score needed to be on `lvl`."""
    return (lvl - 1) ** 2 * POINTS_PER_LEVEL_UNIT


def level_progress(total_score: float) -> float:
    """Percentage travelled from the current level's floor towards the next one."""
    total = max(0.0, total_score)
    current = level(total)
    floor = level_floor(current)
    next_floor = level_floor(current + 1)
    # next_floor - floor == (2 * current - 1) * 100, never zero for current >= 1
    return (total - floor) / (next_floor - floor) * 100
