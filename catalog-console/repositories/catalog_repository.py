"""
Catalog repository (persistence).

This module provides *only* persistence operations for catalog items. It
contains no bucketing or ranking rules; it reads rows into CatalogItem values
and writes back the two results of the exposure-order engine: a full ordered
id list for one bucket, and bulk sell-date changes.
"""

from __future__ import annotations

import os
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Sequence

from domain.catalog_item import CatalogItem
from repositories.client import get_supabase

# Supabase table name for catalog products.
# Keep this aligned with your database schema.
_PRODUCTS_TABLE: str = os.getenv("CATALOG_PRODUCTS_TABLE", "products")

# Postgres function that rewrites order_index for a full ordered id list in
# one transaction (order_index = position + 1).
_UPDATE_ORDER_RPC: str = "update_product_order"

# Rows per request; matches the default PostgREST max-rows cap.
_PAGE_SIZE: int = 1000


def _parse_sell_date(value: Any) -> Optional[date]:
    """
    Parse a Supabase sell date.

    Accepts `date` columns ("2025-01-31"), timestamps ("2025-01-31T00:00:00Z")
    and empty values.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise TypeError(f"Unsupported sell_date type: {type(value)!r}")


def _parse_rank(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _row_to_item(row: Mapping[str, Any]) -> CatalogItem:
    """Convert a Supabase row into a CatalogItem."""

    return CatalogItem(
        id=int(row["id"]),
        name=str(row.get("name") or ""),
        price=int(row.get("price") or 0),
        stock=int(row.get("stock") or 0),
        image_url=str(row.get("image_url") or ""),
        sell_date=_parse_sell_date(row.get("sell_date")),
        rank=_parse_rank(row.get("order_index")),
    )


def list_catalog_items() -> List[CatalogItem]:
    """
    Fetch every catalog item.

    Rows are returned in id order so that bucket grouping, and therefore rank
    repair, is deterministic across reloads. Supabase caps each response, so
    the table is read page by page until a short page comes back.
    """

    supabase = get_supabase()

    # Fetch all with pagination
    all_rows: List[Mapping[str, Any]] = []
    offset = 0

    while True:
        response = (
            supabase.table(_PRODUCTS_TABLE)
            .select("id, name, price, stock, image_url, sell_date, order_index")
            .order("id")
            .range(offset, offset + _PAGE_SIZE - 1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list catalog items: {error}")

        page_rows = getattr(response, "data", None) or []
        all_rows.extend(page_rows)
        if len(page_rows) < _PAGE_SIZE:
            break
        offset += len(page_rows)

    return [_row_to_item(row) for row in all_rows]


def update_product_order(product_ids: Sequence[int]) -> None:
    """
    Persist a bucket's exposure order.

    `product_ids` is the full ordered id list for one bucket; position i is
    stored as order_index i + 1. The write is a single RPC call so the
    bucket's order is replaced atomically (last writer wins).
    """

    if not product_ids:
        return

    response = get_supabase().rpc(
        _UPDATE_ORDER_RPC,
        {"p_product_ids": [int(product_id) for product_id in product_ids]},
    ).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to update product order: {error}")


def bulk_update_sell_date(product_ids: Sequence[int], sell_date: date) -> int:
    """
    Set `sell_date` for many products in one update. order_index and stock
    are left untouched.

    Returns:
        Number of rows updated.
    """

    if not product_ids:
        return 0

    response = (
        get_supabase()
        .table(_PRODUCTS_TABLE)
        .update({"sell_date": sell_date.isoformat()})
        .in_("id", [int(product_id) for product_id in product_ids])
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to update sell date: {error}")

    updated_rows = getattr(response, "data", None) or []
    return len(updated_rows)


__all__ = [
    "list_catalog_items",
    "update_product_order",
    "bulk_update_sell_date",
]
