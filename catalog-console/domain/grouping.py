"""
Domain: Grouping catalog items into sell-date buckets.

Contract excerpts implemented here:
- Every item lands in exactly one bucket (exhaustive, disjoint partition).
- Buckets are returned in display order (see `BucketKey.sort_key`).
- Within a bucket, items with a stored rank come first, ascending by rank;
  items without a rank follow. The sort is stable, so ties and unranked items
  keep their input order.
- Invalid stored ranks (zero, negative, duplicated) are not corrected here.
  Canonicalization happens only when an order edit session opens, so a plain
  reload never perturbs the on-screen list.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from .catalog_item import CatalogItem
from .sell_bucket import BucketCutoffs, BucketKey

PREVIEW_LIMIT = 5


def _rank_sort_key(item: CatalogItem) -> tuple[int, int]:
    if item.rank is None:
        return (1, 0)
    return (0, item.rank)


def sort_within_bucket(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    """Order a bucket's items by stored rank, unranked items last (stable)."""

    return sorted(items, key=_rank_sort_key)


def group_by_bucket(items: Iterable[CatalogItem], now: datetime) -> Dict[BucketKey, List[CatalogItem]]:
    """
    Partition items into buckets for a fixed `now`.

    Cutoffs are computed once for the whole batch. The returned dict iterates
    in bucket display order.
    """

    cutoffs = BucketCutoffs.for_now(now)

    groups: Dict[BucketKey, List[CatalogItem]] = {}
    for item in items:
        groups.setdefault(cutoffs.classify(item.sell_date), []).append(item)

    return {
        key: sort_within_bucket(groups[key])
        for key in sorted(groups, key=BucketKey.sort_key)
    }


@dataclass(frozen=True, slots=True)
class BucketPreview:
    """First few items of a bucket plus how many are hidden."""

    items: List[CatalogItem]
    remaining_count: int


def preview_bucket(items: Sequence[CatalogItem], limit: int = PREVIEW_LIMIT) -> BucketPreview:
    if limit < 0:
        raise ValueError("limit must be >= 0")
    return BucketPreview(items=list(items[:limit]), remaining_count=max(len(items) - limit, 0))
