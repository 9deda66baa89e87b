"""
Domain: Selection helpers for the bulk sell-date screen.

Name search, bucket filtering and whole-bucket selection toggles. Pure
functions over item values; selections are returned as new frozensets.
"""

from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, FrozenSet, Iterable, List

from .catalog_item import CatalogItem
from .sell_bucket import BucketCutoffs, BucketKey


def filter_by_name(items: Iterable[CatalogItem], query: str) -> List[CatalogItem]:
    """Case-insensitive substring match on the item name. Blank queries match everything."""

    needle = query.strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in item.name.lower()]


def items_in_bucket(items: Iterable[CatalogItem], bucket: BucketKey, now: datetime) -> List[CatalogItem]:
    cutoffs = BucketCutoffs.for_now(now)
    return [item for item in items if cutoffs.classify(item.sell_date) == bucket]


def toggle_bucket_selection(
    selected_ids: AbstractSet[int],
    bucket_items: Iterable[CatalogItem],
) -> FrozenSet[int]:
    """
    Select or deselect a whole bucket.

    If every item of the bucket is already selected, they are all removed
    from the selection; otherwise they are all added.
    """

    bucket_ids = {item.id for item in bucket_items}
    if bucket_ids and bucket_ids <= selected_ids:
        return frozenset(selected_ids - bucket_ids)
    return frozenset(selected_ids | bucket_ids)
