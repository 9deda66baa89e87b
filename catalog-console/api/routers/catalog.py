"""
Catalog Order API Endpoints.

Endpoints for browsing sell-date buckets and editing their exposure order.
"""

import logging
from datetime import datetime, timezone
from typing import List, Mapping

from fastapi import APIRouter, Depends, HTTPException

from api.models import (
    BucketListResponse,
    BucketResponse,
    CatalogItemResponse,
    RankEntry,
    RankingResponse,
    RankShiftRequest,
    RankShiftResponse,
    SaveOrderRequest,
    SaveOrderResponse,
)
from domain.catalog_item import CatalogItem
from domain.ranking import ordered_ids
from domain.sell_bucket import BucketKey
from services.catalog_order_service import (
    BucketNotFoundError,
    OrderMismatchError,
    list_buckets,
    open_order_session,
    preview_rank_change,
    save_bucket_order,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_now() -> datetime:
    """Current instant; overridden in tests for deterministic bucketing."""
    return datetime.now(timezone.utc)


def item_response(item: CatalogItem) -> CatalogItemResponse:
    return CatalogItemResponse(
        id=item.id,
        name=item.name,
        price=item.price,
        stock=item.stock,
        image_url=item.image_url,
        sell_date=item.sell_date,
        rank=item.rank,
    )


def _rank_entries(ranking: Mapping[int, int]) -> List[RankEntry]:
    return [RankEntry(item_id=item_id, rank=ranking[item_id]) for item_id in ordered_ids(ranking)]


@router.get(
    "/catalog/buckets",
    response_model=BucketListResponse,
    summary="List Sell-Date Buckets",
    description="Group the catalog into sell-date buckets in display order, with a preview of each bucket."
)
def get_buckets(now: datetime = Depends(get_now)):
    """
    List sell-date buckets.

    Exact dates come first (newest first), then the 7-day and 30-day aged
    buckets, then items without a sell date.
    """
    try:
        summaries = list_buckets(now)

        buckets = [
            BucketResponse(
                bucket_key=summary.key.to_token(),
                kind=summary.key.kind.value,
                sell_date=summary.key.sell_date,
                status=summary.status.value if summary.status else None,
                item_count=summary.item_count,
                has_rank_conflicts=summary.has_rank_conflicts,
                preview=[item_response(item) for item in summary.preview.items],
                remaining_count=summary.preview.remaining_count,
            )
            for summary in summaries
        ]

        return BucketListResponse(
            buckets=buckets,
            total_items=sum(summary.item_count for summary in summaries),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to list buckets")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list buckets: {str(e)}"
        )


@router.get(
    "/catalog/buckets/{bucket_key}/ranking",
    response_model=RankingResponse,
    summary="Open Bucket Ranking",
    description="Return the canonical ranking of one bucket, repairing missing, zero or duplicated ranks."
)
def get_bucket_ranking(bucket_key: str, now: datetime = Depends(get_now)):
    """
    Open a bucket for order editing.

    The repaired ranking is not persisted; save it with
    `PUT /catalog/buckets/{bucket_key}/order`.
    """
    try:
        try:
            session = open_order_session(bucket_key, now)
        except BucketNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return RankingResponse(
            bucket_key=session.bucket.to_token(),
            items=[item_response(item) for item in session.ranked_items()],
            ranking=_rank_entries(session.ranking),
            repaired=any(item.rank != session.ranking[item.id] for item in session.items),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to open ranking for bucket %s", bucket_key)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to open ranking: {str(e)}"
        )


@router.post(
    "/catalog/rankings/shift",
    response_model=RankShiftResponse,
    summary="Change One Item's Rank",
    description="Move one item to a new rank; items in between shift by one so the ranking stays 1..N."
)
def shift_ranking(request: RankShiftRequest):
    """
    Apply one rank change to a ranking held by the editor.

    **Example:** ranking `{1:1, 2:2, 3:3, 4:4}`, move item 4 to rank 2
    → `{1:1, 4:2, 2:3, 3:4}`.
    """
    ranking = request.ranking_map()
    if len(ranking) != len(request.ranking):
        raise HTTPException(status_code=400, detail="ranking lists an item more than once")

    try:
        updated = preview_rank_change(ranking, request.item_id, request.new_rank)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RankShiftResponse(
        ranking=_rank_entries(updated),
        ordered_ids=ordered_ids(updated),
    )


@router.put(
    "/catalog/buckets/{bucket_key}/order",
    response_model=SaveOrderResponse,
    summary="Save Bucket Order",
    description="Persist the full ordered id list of one bucket."
)
def put_bucket_order(bucket_key: str, request: SaveOrderRequest, now: datetime = Depends(get_now)):
    """
    Save the exposure order of a bucket.

    The list must contain every item of the bucket exactly once.
    """
    try:
        try:
            saved = save_bucket_order(bucket_key, request.ordered_ids, now)
        except BucketNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except OrderMismatchError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return SaveOrderResponse(
            bucket_key=BucketKey.from_token(bucket_key).to_token(),
            ordered_ids=saved,
            message=f"Order of {len(saved)} products saved."
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to save order for bucket %s", bucket_key)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to save order: {str(e)}"
        )
