"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Catalog Models
# ============================================================================

class CatalogItemResponse(BaseModel):
    """Single catalog item in API response."""
    id: int
    name: str
    price: int
    stock: int
    image_url: str
    sell_date: Optional[date] = None
    rank: Optional[int] = None


class BucketResponse(BaseModel):
    """One sell-date bucket on the exposure-order overview."""
    bucket_key: str  # "2025-01-31", "AGED_7", "AGED_30" or "UNASSIGNED"
    kind: str
    sell_date: Optional[date] = None
    status: Optional[str] = None  # "UPCOMING", "TODAY", "ENDED" for exact dates
    item_count: int
    has_rank_conflicts: bool
    preview: List[CatalogItemResponse]
    remaining_count: int

    class Config:
        json_schema_extra = {
            "example": {
                "bucket_key": "2025-01-31",
                "kind": "EXACT_DATE",
                "sell_date": "2025-01-31",
                "status": "UPCOMING",
                "item_count": 7,
                "has_rank_conflicts": True,
                "preview": [],
                "remaining_count": 2
            }
        }


class BucketListResponse(BaseModel):
    """Response for bucket listing."""
    buckets: List[BucketResponse]
    total_items: int


# ============================================================================
# Ranking Models
# ============================================================================

class RankEntry(BaseModel):
    """One item's position inside a bucket ranking."""
    item_id: int
    rank: int = Field(..., ge=1)


class RankingResponse(BaseModel):
    """Canonical ranking for a bucket, as opened for editing."""
    bucket_key: str
    items: List[CatalogItemResponse]  # in rank order
    ranking: List[RankEntry]  # in rank order
    repaired: bool

    class Config:
        json_schema_extra = {
            "example": {
                "bucket_key": "2025-01-31",
                "items": [],
                "ranking": [
                    {"item_id": 12, "rank": 1},
                    {"item_id": 9, "rank": 2}
                ],
                "repaired": False
            }
        }


class RankShiftRequest(BaseModel):
    """Request to move one item to a new rank within a ranking."""
    ranking: List[RankEntry] = Field(..., min_length=1)
    item_id: int
    new_rank: int

    def ranking_map(self) -> Dict[int, int]:
        return {entry.item_id: entry.rank for entry in self.ranking}

    class Config:
        json_schema_extra = {
            "example": {
                "ranking": [
                    {"item_id": 1, "rank": 1},
                    {"item_id": 2, "rank": 2},
                    {"item_id": 3, "rank": 3},
                    {"item_id": 4, "rank": 4}
                ],
                "item_id": 4,
                "new_rank": 2
            }
        }


class RankShiftResponse(BaseModel):
    """Ranking after a shift, in rank order."""
    ranking: List[RankEntry]
    ordered_ids: List[int]


class SaveOrderRequest(BaseModel):
    """Full ordered id list for one bucket (rank = position + 1)."""
    ordered_ids: List[int] = Field(
        ...,
        min_length=1,
        description="Every item id of the bucket, in display order"
    )


class SaveOrderResponse(BaseModel):
    """Response after saving a bucket order."""
    bucket_key: str
    ordered_ids: List[int]
    message: str


# ============================================================================
# Bulk Sell Date Models
# ============================================================================

class BulkSellDateRequestModel(BaseModel):
    """Request to move selected products to a new sell date."""
    product_ids: List[int] = Field(
        ...,
        min_length=1,
        description="Products to move"
    )
    new_sell_date: date

    class Config:
        json_schema_extra = {
            "example": {
                "product_ids": [3, 7, 12],
                "new_sell_date": "2025-02-01"
            }
        }


class SellDateProductListResponse(BaseModel):
    """Products on the bulk sell-date screen after name and bucket filters."""
    items: List[CatalogItemResponse]
    total: int


class BucketSelectionRequest(BaseModel):
    """Current selection plus the bucket whose select-all box was clicked."""
    selected_ids: List[int] = Field(default_factory=list)
    bucket_key: str

    class Config:
        json_schema_extra = {
            "example": {
                "selected_ids": [3, 7],
                "bucket_key": "AGED_7"
            }
        }


class BucketSelectionResponse(BaseModel):
    bucket_key: str
    selected_ids: List[int]  # ascending


class SellDateChange(BaseModel):
    product_id: int
    sell_date: date


class BulkSellDateResponse(BaseModel):
    """Response after a bulk sell-date move."""
    success: bool
    moved: int
    changes: List[SellDateChange]
    errors: List[str]
    message: Optional[str] = None


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
