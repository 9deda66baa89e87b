"""
Domain: Bulk sell-date moves.

Contract excerpts implemented here:
- Moving items to a new sell date replaces `sell_date` only. Rank and stock
  are preserved.
- Ranks in the destination bucket are NOT re-canonicalized. The destination
  may hold rank conflicts until an operator next opens its order edit
  session, where `repair_ranking` resolves them first-seen-wins.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Tuple

from .catalog_item import CatalogItem


def move_to_date(items: Iterable[CatalogItem], new_sell_date: date) -> List[CatalogItem]:
    """Return copies of `items` with `sell_date` replaced."""

    return [item.with_sell_date(new_sell_date) for item in items]


def sell_date_changes(items: Iterable[CatalogItem], new_sell_date: date) -> List[Tuple[int, date]]:
    """(item_id, new_sell_date) pairs handed to the catalog store."""

    return [(item.id, new_sell_date) for item in items]


def all_on_date(items: Iterable[CatalogItem], sell_date: date) -> bool:
    """True iff every item already sells on `sell_date` (a move would change nothing)."""

    return all(item.sell_date == sell_date for item in items)
