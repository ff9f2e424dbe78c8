"""
Schemas returned by the lifecycle engine, the health aggregator and the bulk layer.
All plain data, so the same results back the HTTP API, the CLI and the tests.
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from crosslist.core.enums import AdjustType, ListingStatus


class ListingExpiry(BaseModel):
    """One item x platform pair that is expired or about to expire."""
    item_id: str
    platform: str
    expiry_date: date
    listed_date: Optional[date] = None
    days_left: Optional[int] = None


class ListingHealth(BaseModel):
    total_platforms: int = 0
    active: int = 0
    sold: int = 0
    sold_elsewhere: int = 0
    expired: int = 0
    delisted: int = 0
    draft: int = 0


class FleetStats(BaseModel):
    total_active: int = 0
    total_expired: int = 0
    total_expiring_soon: int = 0
    total_sold_elsewhere: int = 0
    items_not_listed: int = 0
    items_single_platform: int = 0


class SaleResult(BaseModel):
    item_id: str
    platform: str
    qty_remaining: int
    cascaded: List[str] = []


class SweepResult(BaseModel):
    transitioned: int
    auto_relisted: int = 0


class BulkResult(BaseModel):
    """Work actually done by a bulk operation, never an assumed total."""
    processed: int = 0
    failed: int = 0
    item_ids: List[str] = []


class PriceAdjustFilter(BaseModel):
    category: Optional[str] = None
    platform: Optional[str] = None
    min_days_listed: int = Field(default=0, ge=0)


class PriceAdjustment(BaseModel):
    adjust_type: AdjustType = AdjustType.PERCENT
    value: float


class BulkPriceRequest(BaseModel):
    filter: PriceAdjustFilter = PriceAdjustFilter()
    adjustment: PriceAdjustment


class BulkPriceResult(BaseModel):
    adjusted: int = 0
    item_ids: List[str] = []


class StatusUpdate(BaseModel):
    status: ListingStatus


class ListingDateUpdate(BaseModel):
    listed_date: Optional[date] = None


class AutoRelistSettings(BaseModel):
    enabled: bool
    candidates: int = 0
