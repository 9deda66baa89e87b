"""
Bulk sell-date service.

Moves a selection of catalog items, possibly spread over several buckets, to
one new sell date. Ranks and stock are preserved; the destination bucket may
hold rank conflicts until its order edit session is next opened.

Also serves the selection screen: name and bucket filters, and whole-bucket
select/deselect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import AbstractSet, FrozenSet, List, Optional, Tuple

from domain.bulk_move import all_on_date, move_to_date, sell_date_changes
from domain.catalog_filters import filter_by_name, items_in_bucket, toggle_bucket_selection
from domain.catalog_item import CatalogItem
from domain.sell_bucket import BucketKey
from repositories.catalog_repository import bulk_update_sell_date, list_catalog_items

logger = logging.getLogger(__name__)


def list_sell_date_candidates(
    now: datetime,
    query: str = "",
    bucket_token: Optional[str] = None,
) -> List[CatalogItem]:
    """
    Products shown on the bulk sell-date screen.

    Args:
        now: Instant used to classify sell dates into buckets
        query: Case-insensitive name search; blank matches everything
        bucket_token: Restrict to one bucket ("2025-02-01", "AGED_7", ...)

    Raises:
        ValueError: If bucket_token cannot be parsed
    """
    bucket = BucketKey.from_token(bucket_token) if bucket_token else None

    items = list_catalog_items()
    if bucket is not None:
        items = items_in_bucket(items, bucket, now)
    return filter_by_name(items, query)


def toggle_bucket(
    selected_ids: AbstractSet[int],
    bucket_token: str,
    now: datetime,
) -> FrozenSet[int]:
    """
    Select or deselect every product of one bucket.

    A fully selected bucket is cleared; otherwise all of its products are
    added. Selections outside the bucket are kept.

    Raises:
        ValueError: If bucket_token cannot be parsed
    """
    bucket = BucketKey.from_token(bucket_token)
    bucket_items = items_in_bucket(list_catalog_items(), bucket, now)
    return toggle_bucket_selection(selected_ids, bucket_items)


@dataclass(frozen=True, slots=True)
class BulkSellDateRequest:
    """Request to move the selected products to a new sell date."""
    product_ids: List[int]
    new_sell_date: date


@dataclass(frozen=True, slots=True)
class BulkSellDateResult:
    """
    Result of a bulk sell-date move.

    success: True if the move was persisted
    moved: Number of products whose sell date was written
    changes: (product_id, new_sell_date) pairs that were persisted
    errors: List of error messages (empty if success=True)
    """
    success: bool
    moved: int
    changes: List[Tuple[int, date]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    message: str = ""


def _failure(*errors: str) -> BulkSellDateResult:
    return BulkSellDateResult(success=False, moved=0, errors=list(errors))


def execute_bulk_sell_date(request: BulkSellDateRequest) -> BulkSellDateResult:
    """
    Execute a bulk sell-date move.

    Process:
    1. Reject an empty selection
    2. Load the catalog and resolve the selected products
    3. Reject unknown product ids
    4. Reject a move where every product already sells on the new date
    5. Apply the move and persist the (id, date) pairs

    Args:
        request: BulkSellDateRequest with product_ids and new_sell_date

    Returns:
        BulkSellDateResult with success status and the persisted changes
    """
    selected_ids = list(dict.fromkeys(int(product_id) for product_id in request.product_ids))

    # 1. Validate selection
    if not selected_ids:
        return _failure("Select at least one product to move.")

    # 2. Resolve selected products
    by_id = {item.id: item for item in list_catalog_items()}
    missing = [product_id for product_id in selected_ids if product_id not in by_id]

    # 3. Unknown ids
    if missing:
        return _failure(f"{len(missing)} selected products do not exist: {missing}")

    selected = [by_id[product_id] for product_id in selected_ids]

    # 4. Nothing to change
    if all_on_date(selected, request.new_sell_date):
        return _failure(
            f"All selected products already sell on {request.new_sell_date.isoformat()}."
        )

    # 5. Apply and persist
    moved = move_to_date(selected, request.new_sell_date)
    changes = sell_date_changes(moved, request.new_sell_date)
    updated = bulk_update_sell_date([product_id for product_id, _ in changes], request.new_sell_date)

    if updated != len(changes):
        logger.warning(
            "Bulk sell-date update touched %d rows, expected %d",
            updated,
            len(changes),
            extra={"new_sell_date": request.new_sell_date.isoformat(), "product_ids": selected_ids},
        )

    ranked = [item.id for item in moved if item.rank is not None]
    if ranked:
        # Destination ranks are left as-is; the next order edit session repairs them.
        logger.warning(
            "Moved %d ranked product(s) to %s; destination ranks may conflict until reordered",
            len(ranked),
            request.new_sell_date.isoformat(),
            extra={"new_sell_date": request.new_sell_date.isoformat(), "ranked_item_ids": ranked},
        )

    logger.info(
        "Moved %d product(s) to sell date %s",
        len(changes),
        request.new_sell_date.isoformat(),
    )

    return BulkSellDateResult(
        success=True,
        moved=len(changes),
        changes=changes,
        errors=[],
        message=f"Sell date of {len(changes)} products changed to {request.new_sell_date.isoformat()}.",
    )


__all__ = [
    "BulkSellDateRequest",
    "BulkSellDateResult",
    "execute_bulk_sell_date",
    "list_sell_date_candidates",
    "toggle_bucket",
]
