"""
Tests for `domain/bulk_move.py` and `domain/catalog_filters.py`.

Covers contract rules:
- A bulk move replaces sell_date only; rank and stock are preserved.
- Moved items are copies; originals are unchanged.
- The destination bucket may hold rank conflicts until repaired on next open.
- Name search, bucket filtering and whole-bucket selection toggles.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from domain.bulk_move import all_on_date, move_to_date, sell_date_changes
from domain.catalog_filters import filter_by_name, items_in_bucket, toggle_bucket_selection
from domain.grouping import group_by_bucket
from domain.order_session import RankEditSession
from domain.ranking import stored_ranks_are_canonical
from domain.sell_bucket import AGED_7, BucketKey

NOW = datetime(2025, 1, 31, 12, 0, 0, tzinfo=timezone.utc)
TARGET = date(2025, 2, 3)


def test_move_to_date_replaces_sell_date_only(make_item) -> None:
    """Verify copies carry the new date with rank and stock untouched."""

    items = [
        make_item(1, rank=2, sell_date=date(2025, 1, 31), stock=4),
        make_item(2, rank=None, sell_date=None, stock=0),
    ]

    moved = move_to_date(items, TARGET)

    assert [item.sell_date for item in moved] == [TARGET, TARGET]
    assert [item.rank for item in moved] == [2, None]
    assert [item.stock for item in moved] == [4, 0]
    assert [item.sell_date for item in items] == [date(2025, 1, 31), None]


def test_sell_date_changes_payload(make_item) -> None:
    """Verify (item_id, new_sell_date) pairs in selection order."""

    items = [make_item(5), make_item(3)]

    assert sell_date_changes(items, TARGET) == [(5, TARGET), (3, TARGET)]


def test_all_on_date(make_item) -> None:
    """Verify the already-on-that-date check."""

    assert all_on_date([make_item(1, sell_date=TARGET), make_item(2, sell_date=TARGET)], TARGET)
    assert not all_on_date([make_item(1, sell_date=TARGET), make_item(2, sell_date=None)], TARGET)


def test_move_leaves_destination_conflicts_until_next_repair(make_item) -> None:
    """Verify a merge may produce duplicate ranks that the next session repairs first-seen-wins."""

    destination = [make_item(1, rank=1, sell_date=TARGET), make_item(2, rank=2, sell_date=TARGET)]
    incoming = move_to_date([make_item(3, rank=1, sell_date=date(2025, 1, 31))], TARGET)

    bucket_items = group_by_bucket(destination + incoming, NOW)[BucketKey.exact(TARGET)]
    assert not stored_ranks_are_canonical(bucket_items)

    session = RankEditSession.open(BucketKey.exact(TARGET), bucket_items)
    # Items 1 and 3 share rank 1; both are reassigned in list order around item 2.
    assert session.ranking == {1: 1, 3: 3, 2: 2}


def test_filter_by_name_is_case_insensitive(make_item) -> None:
    """Verify substring search ignores case and blank queries return everything."""

    items = [make_item(1, name="Fresh Tomato 1kg"), make_item(2, name="Organic Potato"), make_item(3, name="Onion")]

    assert [item.id for item in filter_by_name(items, "TOMATO")] == [1]
    assert [item.id for item in filter_by_name(items, "o")] == [1, 2, 3]
    assert [item.id for item in filter_by_name(items, "   ")] == [1, 2, 3]


def test_items_in_bucket(make_item) -> None:
    """Verify filtering to one bucket uses the same classification as grouping."""

    items = [
        make_item(1, sell_date=date(2025, 1, 20)),
        make_item(2, sell_date=date(2025, 1, 31)),
        make_item(3, sell_date=date(2025, 1, 10)),
    ]

    assert [item.id for item in items_in_bucket(items, AGED_7, NOW)] == [1, 3]


def test_toggle_bucket_selection(make_item) -> None:
    """Verify a partly selected bucket becomes fully selected, and a fully selected one is cleared."""

    bucket_items = [make_item(1), make_item(2)]

    partly = toggle_bucket_selection({1, 9}, bucket_items)
    assert partly == frozenset({1, 2, 9})

    cleared = toggle_bucket_selection(partly, bucket_items)
    assert cleared == frozenset({9})

    assert toggle_bucket_selection(frozenset(), []) == frozenset()
