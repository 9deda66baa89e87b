"""
Domain: Catalog item value object.

Catalog items are created and destroyed by the catalog store. Within one
grouping or ranking pass they are treated as immutable values; changes to the
sell date or rank produce new copies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional


@dataclass(frozen=True, slots=True)
class CatalogItem:
    """
    A product as seen by the scheduling and exposure-order engine.

    `rank` is the persisted display position inside the item's bucket. It is
    not guaranteed to be valid: persisted data may hold duplicates, zeros or
    gaps, which are repaired only when an order edit session opens.
    """

    id: int
    name: str
    price: int = 0
    stock: int = 0
    image_url: str = ""
    sell_date: Optional[date] = None
    rank: Optional[int] = None

    def with_sell_date(self, sell_date: Optional[date]) -> "CatalogItem":
        """Return a copy with a different sell date; rank and stock are kept."""

        return replace(self, sell_date=sell_date)

    def with_rank(self, rank: Optional[int]) -> "CatalogItem":
        return replace(self, rank=rank)
