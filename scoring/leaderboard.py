# scoring/leaderboard.py
"""
Leaderboard aggregation.

Submissions are grouped per user, totals are sorted (descending, or ascending
for "lower is better" challenges) and positions are assigned with competition
ranking: tied entries share a position and the next distinct score skips
ahead by the size of the tie group (1, 1, 3, ...).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from scoring.errors import UNKNOWN_USER


@dataclass
class LeaderboardEntry:
    user_id: str
    display_name: str
    score: float
    position: int = 0
    crew_id: Optional[str] = None
    tied_with: Optional[int] = None
    crew_name: Optional[str] = None
    achievements: List[str] = field(default_factory=list)


def _field(record: Any, name: str):
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def assign_competition_ranks(entries: Sequence[Any], lower_score_is_better: bool = False) -> List[Any]:
    """
    Sort `entries` (anything with `score`, `position` and `tied_with`
    attributes) and set their positions in place. Returns the sorted list.
    Python's sort is stable, so ties keep their incoming order.
    """
    ranked = sorted(entries, key=lambda e: e.score, reverse=not lower_score_is_better)

    i = 0
    while i < len(ranked):
        j = i
        while j + 1 < len(ranked) and ranked[j + 1].score == ranked[i].score:
            j += 1
        group_size = j - i + 1
        for entry in ranked[i:j + 1]:
            entry.position = i + 1
            entry.tied_with = group_size if group_size > 1 else None
        i = j + 1

    return ranked


def aggregate_leaderboard(
    submissions: Iterable[Any],
    crew_id: Optional[str] = None,
    lower_score_is_better: bool = False,
    display_names: Optional[Mapping[str, str]] = None,
) -> List[LeaderboardEntry]:
    """
    Build one ranked entry per user from submission records (objects or
    dicts exposing `user_id` and `score`). Users missing from
    `display_names` get the "Unknown User" placeholder.
    """
    display_names = display_names or {}
    totals: Dict[str, float] = {}
    for record in submissions:
        user_id = _field(record, "user_id")
        totals[user_id] = totals.get(user_id, 0.0) + _field(record, "score")

    entries = [
        LeaderboardEntry(
            user_id=user_id,
            display_name=display_names.get(user_id) or UNKNOWN_USER,
            score=score,
            crew_id=crew_id,
        )
        for user_id, score in totals.items()
    ]
    return assign_competition_ranks(entries, lower_score_is_better)
