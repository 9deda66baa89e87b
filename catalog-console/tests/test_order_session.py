"""
Tests for `domain/order_session.py`.

Covers contract rules:
- Opening a session repairs stored ranks; nothing else changes.
- Every edit keeps the ranking canonical and returns a new session.
- Undo/redo walk the edit history without touching earlier session values.
- Invalid rank requests are rejected before any shift.
- The saved payload is the full id list in rank order.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from domain.order_session import RankEditSession
from domain.ranking import is_canonical
from domain.sell_bucket import BucketKey

BUCKET = BucketKey.exact(date(2025, 2, 1))


@pytest.fixture
def session(make_item) -> RankEditSession:
    items = [make_item(1, rank=1), make_item(2, rank=2), make_item(3, rank=3), make_item(4, rank=4)]
    return RankEditSession.open(BUCKET, items)


def test_open_repairs_stored_ranks(make_item) -> None:
    """Verify a session opened on conflicting ranks starts canonical and clean."""

    items = [make_item(1, rank=2), make_item(2, rank=2), make_item(3, rank=None)]

    opened = RankEditSession.open(BUCKET, items)

    assert opened.ranking == {1: 1, 2: 2, 3: 3}
    assert opened.size == 3
    assert opened.is_dirty is False
    assert opened.can_undo is False


def test_change_rank_cascades_and_returns_new_session(session: RankEditSession) -> None:
    """Verify a rank change shifts the window and leaves the original session untouched."""

    edited = session.change_rank(4, 2)

    assert edited is not session
    assert edited.ranking == {1: 1, 2: 3, 3: 4, 4: 2}
    assert session.ranking == {1: 1, 2: 2, 3: 3, 4: 4}
    assert edited.is_dirty is True
    assert edited.ordered_ids() == [1, 4, 2, 3]
    assert [item.id for item in edited.sorted_items()] == [1, 4, 2, 3]


def test_change_rank_to_current_rank_returns_same_session(session: RankEditSession) -> None:
    """Verify a no-op edit does not grow the history."""

    assert session.change_rank(2, 2) is session


def test_sequence_of_edits_stays_canonical(session: RankEditSession) -> None:
    """Verify the ranking is canonical after every step of an editing sequence."""

    current = session
    for item_id, new_rank in [(1, 4), (3, 1), (2, 3), (4, 4), (1, 1)]:
        current = current.change_rank(item_id, new_rank)
        assert is_canonical(current.ranking, current.item_ids)
        assert current.rank_of(item_id) == new_rank


def test_undo_and_redo(session: RankEditSession) -> None:
    """Verify undo restores the previous ranking and redo reapplies it."""

    first = session.change_rank(1, 3)
    second = first.change_rank(4, 1)

    undone = second.undo()
    assert undone.ranking == first.ranking
    assert undone.can_redo is True

    redone = undone.redo()
    assert redone.ranking == second.ranking
    assert redone.can_redo is False

    back_to_start = undone.undo()
    assert back_to_start.ranking == session.ranking
    assert back_to_start.is_dirty is False


def test_new_edit_clears_redo(session: RankEditSession) -> None:
    """Verify editing after an undo discards the redo history."""

    undone = session.change_rank(1, 3).undo()
    edited = undone.change_rank(2, 1)

    assert edited.can_redo is False
    with pytest.raises(ValueError):
        edited.redo()


def test_undo_without_history_raises(session: RankEditSession) -> None:
    """Verify undo on a fresh session raises."""

    with pytest.raises(ValueError):
        session.undo()


@pytest.mark.parametrize("item_id, new_rank", [(1, 0), (1, 5), (99, 1)])
def test_change_rank_rejects_invalid_requests(session: RankEditSession, item_id: int, new_rank: int) -> None:
    """Verify out-of-range ranks and unknown items are rejected."""

    with pytest.raises(ValueError):
        session.change_rank(item_id, new_rank)


def test_ranked_items_carry_session_ranks(make_item) -> None:
    """Verify rendered items show the session's ranks while the stored items keep theirs."""

    opened = RankEditSession.open(BUCKET, [make_item(1, rank=2), make_item(2, rank=2), make_item(3, rank=None)])
    edited = opened.change_rank(3, 1)

    assert [(item.id, item.rank) for item in edited.ranked_items()] == [(3, 1), (1, 2), (2, 3)]
    assert [item.rank for item in edited.items] == [2, 2, None]


def test_rank_of_and_find_item(session: RankEditSession) -> None:
    """Verify lookups by item id."""

    assert session.rank_of(3) == 3
    assert session.find_item(3) is not None
    assert session.find_item(99) is None
    with pytest.raises(ValueError):
        session.rank_of(99)


def test_session_is_immutable(session: RankEditSession) -> None:
    """Verify the session cannot be mutated directly (frozen value)."""

    with pytest.raises(FrozenInstanceError):
        session.ranking = {}  # type: ignore[misc]
