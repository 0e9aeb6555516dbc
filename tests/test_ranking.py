"""Tests for the bounded leaderboard."""

import pytest

from snake_arena.services.ranking import BoundedLeaderboard, RankedEntry, outranks


def entry(player: str, score: int, updated_at: int = 0) -> RankedEntry:
    return RankedEntry(
        player=player, score=score, session_id=f"{player}-{score}", updated_at=updated_at
    )


def test_entries_are_sorted_by_score_descending() -> None:
    board = BoundedLeaderboard(capacity=5)
    for score in (3, 9, 1, 7):
        board.consider(entry(f"p{score}", score))

    assert [e.score for e in board.entries()] == [9, 7, 3, 1]
    assert board.minimum().score == 1


def test_consider_reports_one_based_rank() -> None:
    board = BoundedLeaderboard(capacity=3)
    board.consider(entry("a", 10))
    outcome = board.consider(entry("b", 20))

    assert outcome.inserted
    assert outcome.position == 0
    assert outcome.rank == 1


def test_full_board_rejects_scores_not_above_minimum() -> None:
    board = BoundedLeaderboard(capacity=2)
    board.consider(entry("a", 10, updated_at=5))
    board.consider(entry("b", 20, updated_at=5))

    outcome = board.consider(entry("c", 5, updated_at=9))

    assert not outcome.inserted
    assert outcome.rank == 0
    assert [e.player for e in board.entries()] == ["b", "a"]


def test_full_board_evicts_the_minimum() -> None:
    board = BoundedLeaderboard(capacity=2)
    board.consider(entry("a", 10))
    board.consider(entry("b", 20))

    outcome = board.consider(entry("c", 15))

    assert outcome.inserted
    assert outcome.rank == 2
    assert outcome.evicted == entry("a", 10)
    assert [e.player for e in board.entries()] == ["b", "c"]


def test_equal_score_more_recent_ranks_higher() -> None:
    board = BoundedLeaderboard(capacity=3)
    board.consider(entry("old", 10, updated_at=1))
    outcome = board.consider(entry("new", 10, updated_at=2))

    assert outcome.rank == 1
    assert [e.player for e in board.entries()] == ["new", "old"]


def test_tie_with_equal_timestamp_keeps_incumbent_on_full_board() -> None:
    board = BoundedLeaderboard(capacity=1)
    board.consider(entry("first", 10, updated_at=3))
    outcome = board.consider(entry("second", 10, updated_at=3))

    assert not outcome.inserted
    assert board.entries()[0].player == "first"


def test_capacity_is_never_exceeded() -> None:
    board = BoundedLeaderboard(capacity=25)
    for score in range(30):
        board.consider(entry(f"p{score}", score))

    assert len(board) == 25
    assert [e.score for e in board.entries()] == list(range(29, 4, -1))


def test_ranks_report_best_slot_per_player() -> None:
    board = BoundedLeaderboard(capacity=5)
    board.consider(entry("a", 5))
    board.consider(entry("b", 8))
    board.consider(entry("a", 12))

    assert board.ranks() == {"a": 1, "b": 2}


def test_outranks_compares_score_then_recency() -> None:
    assert outranks(entry("a", 2), entry("b", 1))
    assert outranks(entry("a", 1, updated_at=2), entry("b", 1, updated_at=1))
    assert not outranks(entry("a", 1, updated_at=1), entry("b", 1, updated_at=1))


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedLeaderboard(capacity=0)
