"""Tests for leaderboard aggregation and competition ranking."""
from dataclasses import dataclass

from scoring.errors import UNKNOWN_USER
from scoring.leaderboard import LeaderboardEntry, aggregate_leaderboard, assign_competition_ranks


@dataclass
class Record:
    user_id: str
    score: float


NAMES = {"u1": "Una", "u2": "Ugo", "u3": "Ulla", "u4": "Uri"}


def test_sums_per_user_and_ranks_descending():
    board = aggregate_leaderboard(
        [{"user_id": "u1", "score": 50}, {"user_id": "u2", "score": 50}, {"user_id": "u1", "score": 10}],
        crew_id="crew-1",
        display_names=NAMES,
    )
    assert [(e.user_id, e.score, e.position, e.tied_with) for e in board] == [
        ("u1", 60, 1, None),
        ("u2", 50, 2, None),
    ]
    assert all(e.crew_id == "crew-1" for e in board)
    assert board[0].display_name == "Una"


def test_ties_share_position():
    board = aggregate_leaderboard([Record("u1", 50), Record("u2", 50)], display_names=NAMES)
    assert [(e.position, e.tied_with) for e in board] == [(1, 2), (1, 2)]


def test_competition_ranking_skips_after_ties():
    board = aggregate_leaderboard(
        [Record("u1", 30), Record("u2", 30), Record("u3", 20), Record("u4", 30)],
        display_names=NAMES,
    )
    assert [e.position for e in board] == [1, 1, 1, 4]
    assert board[-1].user_id == "u3"
    assert board[-1].tied_with is None


def test_lower_score_is_better_reverses_order():
    board = aggregate_leaderboard([Record("u1", 10), Record("u2", 5)], lower_score_is_better=True)
    assert [e.user_id for e in board] == ["u2", "u1"]
    assert [e.position for e in board] == [1, 2]


def test_empty_input_gives_empty_board():
    assert aggregate_leaderboard([]) == []


def test_unresolved_names_use_placeholder():
    board = aggregate_leaderboard([Record("ghost", 5), Record("u1", 3)], display_names={"u1": "Una"})
    assert board[0].display_name == UNKNOWN_USER
    assert board[1].display_name == "Una"


def test_ties_keep_incoming_order():
    entries = [LeaderboardEntry(user_id=f"u{i}", display_name="x", score=7) for i in range(4)]
    ranked = assign_competition_ranks(entries)
    assert [e.user_id for e in ranked] == ["u0", "u1", "u2", "u3"]
    assert {e.tied_with for e in ranked} == {4}


def test_negative_scores_rank_below_zero():
    board = aggregate_leaderboard([Record("u1", -10), Record("u2", 0), Record("u3", -10)])
    assert [(e.user_id, e.position) for e in board] == [("u2", 1), ("u1", 2), ("u3", 2)]
