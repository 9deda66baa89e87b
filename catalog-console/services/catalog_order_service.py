"""
Catalog order service for the exposure-order screens.

Handles:
- Listing sell-date buckets with previews and conflict flags
- Opening an order edit session (rank repair happens here)
- Stateless rank-change previews for the edit dialog
- Saving a bucket's full ordered id list
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from domain.catalog_item import CatalogItem
from domain.grouping import BucketPreview, group_by_bucket, preview_bucket
from domain.order_session import RankEditSession
from domain.ranking import (
    Ranking,
    is_canonical,
    require_valid_rank_request,
    shift_rank,
    stored_ranks_are_canonical,
)
from domain.sell_bucket import BucketKey, SellStatus
from domain.time import civil_date
from repositories.catalog_repository import list_catalog_items, update_product_order

logger = logging.getLogger(__name__)


class BucketNotFoundError(ValueError):
    """Raised when a bucket key matches no catalog items for the given "now"."""


class OrderMismatchError(ValueError):
    """Raised when a saved order does not list exactly the bucket's current items."""


@dataclass(frozen=True, slots=True)
class BucketSummary:
    """
    One bucket as shown on the exposure-order overview.

    has_rank_conflicts: True if the stored ranks are not a permutation of 1..N
    (missing, zero, duplicated, or left behind by a bulk sell-date move).
    """
    key: BucketKey
    status: Optional[SellStatus]
    items: List[CatalogItem]
    preview: BucketPreview
    has_rank_conflicts: bool

    @property
    def item_count(self) -> int:
        return len(self.items)


def list_buckets(now: datetime) -> List[BucketSummary]:
    """
    Load the catalog and group it into buckets for `now`.

    Returns:
        Bucket summaries in display order
    """
    items = list_catalog_items()
    today = civil_date(now)

    summaries = [
        BucketSummary(
            key=key,
            status=key.status(today),
            items=bucket_items,
            preview=preview_bucket(bucket_items),
            has_rank_conflicts=not stored_ranks_are_canonical(bucket_items),
        )
        for key, bucket_items in group_by_bucket(items, now).items()
    ]

    logger.debug("Grouped %d catalog items into %d buckets", len(items), len(summaries))
    return summaries


def _load_bucket_items(bucket: BucketKey, now: datetime) -> List[CatalogItem]:
    groups = group_by_bucket(list_catalog_items(), now)
    bucket_items = groups.get(bucket)
    if not bucket_items:
        raise BucketNotFoundError(f"No catalog items in bucket {bucket.to_token()}")
    return bucket_items


def open_order_session(bucket_token: str, now: datetime) -> RankEditSession:
    """
    Open an order edit session for one bucket.

    Persisted ranks are repaired into a canonical ranking here. The repair is
    held in memory only; nothing is written until `save_bucket_order`.

    Raises:
        ValueError: If the bucket token cannot be parsed
        BucketNotFoundError: If the bucket has no items
    """
    bucket = BucketKey.from_token(bucket_token)
    bucket_items = _load_bucket_items(bucket, now)
    session = RankEditSession.open(bucket, bucket_items)

    repaired = [
        item.id for item in bucket_items
        if item.rank != session.ranking[item.id]
    ]
    if repaired:
        logger.info(
            "Repaired %d stored rank(s) in bucket %s",
            len(repaired),
            bucket.to_token(),
            extra={"bucket": bucket.to_token(), "repaired_item_ids": repaired},
        )

    return session


def preview_rank_change(
    ranking: Mapping[int, int],
    item_id: int,
    new_rank: int,
) -> Ranking:
    """
    Apply one rank change to a ranking held by the client.

    The ranking must be canonical over its own keys. Invalid requests are
    rejected before the shift is applied.

    Raises:
        ValueError: If the ranking is not canonical, the item is unknown,
            or new_rank is outside 1..N
    """
    bucket_item_ids = list(ranking)
    if not is_canonical(ranking, bucket_item_ids):
        raise ValueError("ranking must be a permutation of 1..N")

    require_valid_rank_request(ranking, bucket_item_ids, item_id, new_rank)
    return shift_rank(ranking, bucket_item_ids, item_id, new_rank)


def save_bucket_order(bucket_token: str, ordered_ids: Sequence[int], now: datetime) -> List[int]:
    """
    Persist the exposure order of one bucket.

    `ordered_ids` must list every item currently in the bucket exactly once;
    rank i + 1 is stored for the item at position i.

    Returns:
        The persisted id list

    Raises:
        BucketNotFoundError: If the bucket has no items
        OrderMismatchError: If ordered_ids is not exactly the bucket's membership
    """
    bucket = BucketKey.from_token(bucket_token)
    bucket_items = _load_bucket_items(bucket, now)

    ids = [int(item_id) for item_id in ordered_ids]
    expected = {item.id for item in bucket_items}
    if len(ids) != len(set(ids)):
        raise OrderMismatchError("ordered_ids contains duplicates")
    if set(ids) != expected:
        missing = sorted(expected - set(ids))
        unexpected = sorted(set(ids) - expected)
        raise OrderMismatchError(
            f"ordered_ids does not match bucket {bucket.to_token()} "
            f"(missing: {missing}, not in bucket: {unexpected})"
        )

    update_product_order(ids)

    logger.info(
        "Saved exposure order for bucket %s (%d items)",
        bucket.to_token(),
        len(ids),
        extra={"bucket": bucket.to_token(), "ordered_ids": ids},
    )
    return ids


__all__ = [
    "BucketNotFoundError",
    "BucketSummary",
    "OrderMismatchError",
    "list_buckets",
    "open_order_session",
    "preview_rank_change",
    "save_bucket_order",
]
