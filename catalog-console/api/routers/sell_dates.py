"""
Sell Date API Endpoints.

Endpoints for the bulk sell-date screen: product search, whole-bucket
selection, and moving the selection to a new sell date.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.models import (
    BucketSelectionRequest,
    BucketSelectionResponse,
    BulkSellDateRequestModel,
    BulkSellDateResponse,
    SellDateChange,
    SellDateProductListResponse,
)
from api.routers.catalog import get_now, item_response
from domain.sell_bucket import BucketKey
from services.bulk_sell_date_service import (
    BulkSellDateRequest,
    execute_bulk_sell_date,
    list_sell_date_candidates,
    toggle_bucket,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/catalog/sell-date/products",
    response_model=SellDateProductListResponse,
    summary="Search Products For Sell-Date Change",
    description="List products filtered by name and, optionally, by sell-date bucket."
)
def get_sell_date_products(
    q: str = Query("", description="Case-insensitive name search"),
    bucket_key: Optional[str] = Query(None, description='Bucket token, e.g. "2025-02-01" or "AGED_7"'),
    now: datetime = Depends(get_now),
):
    """
    Search products to select for a bulk sell-date change.

    **Example:** `GET /catalog/sell-date/products?q=tomato&bucket_key=AGED_7`
    """
    try:
        try:
            items = list_sell_date_candidates(now, query=q, bucket_token=bucket_key)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return SellDateProductListResponse(
            items=[item_response(item) for item in items],
            total=len(items),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to list sell-date products")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list products: {str(e)}"
        )


@router.post(
    "/catalog/sell-date/selection/toggle",
    response_model=BucketSelectionResponse,
    summary="Toggle Bucket Selection",
    description="Select every product of a bucket, or clear them if the bucket is already fully selected."
)
def post_toggle_bucket_selection(request: BucketSelectionRequest, now: datetime = Depends(get_now)):
    try:
        try:
            bucket = BucketKey.from_token(request.bucket_key)
            selected = toggle_bucket(set(request.selected_ids), bucket.to_token(), now)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return BucketSelectionResponse(
            bucket_key=bucket.to_token(),
            selected_ids=sorted(selected),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to toggle selection for bucket %s", request.bucket_key)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to toggle selection: {str(e)}"
        )


@router.post(
    "/catalog/sell-date",
    response_model=BulkSellDateResponse,
    summary="Bulk Change Sell Date",
    description="Move selected products to one sell date. Ranks and stock are left unchanged."
)
def bulk_change_sell_date(request: BulkSellDateRequestModel):
    """
    Move products to a new sell date.

    **Important:**
    - Products keep their stored rank, so the destination bucket may show
      rank conflicts until its order is next edited
    - Returns 400 if the selection is unknown or already on that date

    **Example request:**
    ```json
    {
      "product_ids": [3, 7, 12],
      "new_sell_date": "2025-02-01"
    }
    ```
    """
    try:
        result = execute_bulk_sell_date(
            BulkSellDateRequest(
                product_ids=request.product_ids,
                new_sell_date=request.new_sell_date,
            )
        )

        if not result.success:
            raise HTTPException(
                status_code=400,
                detail="; ".join(result.errors)
            )

        return BulkSellDateResponse(
            success=result.success,
            moved=result.moved,
            changes=[
                SellDateChange(product_id=product_id, sell_date=sell_date)
                for product_id, sell_date in result.changes
            ],
            errors=result.errors,
            message=result.message,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to change sell date")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to change sell date: {str(e)}"
        )
