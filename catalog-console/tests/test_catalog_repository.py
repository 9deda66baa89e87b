"""
Tests for `repositories/catalog_repository.py` with a mocked Supabase client.

Covers:
- Row → CatalogItem conversion (dates, missing ranks, missing fields)
- Paged reads past the per-request row cap
- Full ordered id list persisted through one RPC call
- Bulk sell-date update with an `in` filter, order_index untouched
- Response errors surface as RuntimeError
"""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from repositories.catalog_repository import (
    _row_to_item,
    bulk_update_sell_date,
    list_catalog_items,
    update_product_order,
)


def _chain(data=None, error=None) -> MagicMock:
    """A query builder whose chained calls all return itself."""

    chain = MagicMock()
    for name in ("table", "select", "order", "range", "update", "in_", "rpc"):
        getattr(chain, name).return_value = chain
    chain.execute.return_value = MagicMock(data=data or [], error=error)
    return chain


def test_row_to_item_parses_dates_and_ranks() -> None:
    """Verify date strings, timestamp strings and empty values are parsed."""

    item = _row_to_item({
        "id": "7",
        "name": "Fresh Tomato",
        "price": 3000,
        "stock": 8,
        "image_url": "/images/image1.png",
        "sell_date": "2025-02-01",
        "order_index": 3,
    })
    assert item.id == 7
    assert item.sell_date == date(2025, 2, 1)
    assert item.rank == 3

    from_timestamp = _row_to_item({"id": 8, "sell_date": "2025-02-01T00:00:00+09:00", "order_index": None})
    assert from_timestamp.sell_date == date(2025, 2, 1)
    assert from_timestamp.rank is None
    assert from_timestamp.name == ""
    assert from_timestamp.stock == 0

    unassigned = _row_to_item({"id": 9, "sell_date": None})
    assert unassigned.sell_date is None


@patch("repositories.catalog_repository.get_supabase")
def test_list_catalog_items(mock_get_supabase: MagicMock) -> None:
    """Verify rows are fetched in id order and converted."""

    chain = _chain(data=[
        {"id": 1, "name": "a", "sell_date": "2025-02-01", "order_index": 2},
        {"id": 2, "name": "b", "sell_date": None, "order_index": None},
    ])
    mock_get_supabase.return_value = chain

    items = list_catalog_items()

    chain.table.assert_called_once_with("products")
    chain.order.assert_called_once_with("id")
    assert [item.id for item in items] == [1, 2]
    assert items[0].rank == 2


class _CappedTable:
    """Query builder that serves `rows` honouring `.range` and a per-request row cap."""

    def __init__(self, rows, cap=1000):
        self.rows = rows
        self.cap = cap
        self.ranges = []
        self._start, self._end = 0, len(rows) - 1

    def table(self, _name):
        return self

    def select(self, _columns):
        self._start, self._end = 0, len(self.rows) - 1
        return self

    def order(self, _column):
        return self

    def range(self, start, end):
        self.ranges.append((start, end))
        self._start, self._end = start, end
        return self

    def execute(self):
        end = min(self._end, self._start + self.cap - 1)
        return MagicMock(data=self.rows[self._start:end + 1], error=None)


@patch("repositories.catalog_repository.get_supabase")
def test_list_catalog_items_reads_past_row_cap(mock_get_supabase: MagicMock) -> None:
    """Verify a catalog larger than one response is read completely, page by page."""

    table = _CappedTable([{"id": i, "name": f"p{i}", "sell_date": None} for i in range(1, 1501)])
    mock_get_supabase.return_value = table

    items = list_catalog_items()

    assert len(items) == 1500
    assert [item.id for item in items[-2:]] == [1499, 1500]
    assert table.ranges == [(0, 999), (1000, 1999)]


@patch("repositories.catalog_repository.get_supabase")
def test_list_catalog_items_exact_page_boundary(mock_get_supabase: MagicMock) -> None:
    """Verify a catalog of exactly one full page ends with an empty page."""

    table = _CappedTable([{"id": i, "sell_date": None} for i in range(1, 1001)])
    mock_get_supabase.return_value = table

    assert len(list_catalog_items()) == 1000
    assert table.ranges == [(0, 999), (1000, 1999)]


@patch("repositories.catalog_repository.get_supabase")
def test_list_catalog_items_error_raises(mock_get_supabase: MagicMock) -> None:
    """Verify a response error becomes RuntimeError."""

    mock_get_supabase.return_value = _chain(error="permission denied")

    with pytest.raises(RuntimeError):
        list_catalog_items()


@patch("repositories.catalog_repository.get_supabase")
def test_update_product_order_calls_rpc_with_full_list(mock_get_supabase: MagicMock) -> None:
    """Verify the whole ordered id list is sent in a single RPC."""

    chain = _chain()
    mock_get_supabase.return_value = chain

    update_product_order([4, 1, 3])

    chain.rpc.assert_called_once_with("update_product_order", {"p_product_ids": [4, 1, 3]})
    chain.execute.assert_called_once()


@patch("repositories.catalog_repository.get_supabase")
def test_update_product_order_skips_empty(mock_get_supabase: MagicMock) -> None:
    """Verify an empty list performs no call."""

    update_product_order([])

    mock_get_supabase.assert_not_called()


@patch("repositories.catalog_repository.get_supabase")
def test_bulk_update_sell_date(mock_get_supabase: MagicMock) -> None:
    """Verify only sell_date is written, filtered by id list."""

    chain = _chain(data=[{"id": 3}, {"id": 5}])
    mock_get_supabase.return_value = chain

    updated = bulk_update_sell_date([3, 5], date(2025, 2, 3))

    chain.update.assert_called_once_with({"sell_date": "2025-02-03"})
    chain.in_.assert_called_once_with("id", [3, 5])
    assert updated == 2


@patch("repositories.catalog_repository.get_supabase")
def test_bulk_update_sell_date_error_raises(mock_get_supabase: MagicMock) -> None:
    """Verify a response error becomes RuntimeError."""

    mock_get_supabase.return_value = _chain(error="boom")

    with pytest.raises(RuntimeError):
        bulk_update_sell_date([3], date(2025, 2, 3))
