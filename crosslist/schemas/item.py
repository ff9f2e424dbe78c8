"""
Schemas for inventory items and their per-platform listing fields.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from crosslist.core.enums import ListingStatus, PriceSource


class PriceHistoryEntry(BaseModel):
    date: datetime
    price: float
    source: PriceSource = PriceSource.MANUAL
    platform: Optional[str] = None


class InventoryItem(BaseModel):
    """
    An inventory item as the crosslisting engine sees it.

    The four per-platform mappings (status, listing date, expiry, last relist)
    are the only listing state that is stored; everything else the engine
    reports is derived from them. `external_refs` is keyed by platform and
    belongs to the sync adapter for that platform.
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    id: str
    sku: Optional[str] = None
    name: str = ""
    category: Optional[str] = None
    condition: Optional[str] = None
    notes: Optional[str] = None
    price: float = 0.0
    qty: int = Field(default=0, ge=0)
    upc: Optional[str] = None
    isbn: Optional[str] = None
    images: List[str] = []
    tags: List[str] = []
    added: Optional[date] = None

    platforms: List[str] = []
    platform_status: Dict[str, ListingStatus] = {}
    platform_listing_dates: Dict[str, date] = {}
    platform_listing_expiry: Dict[str, date] = {}
    last_relisted: Dict[str, date] = {}

    external_refs: Dict[str, Dict[str, Any]] = {}
    price_history: List[PriceHistoryEntry] = []

    @field_validator('qty', 'price', mode='before')
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v

    @field_validator('images', 'tags', 'platforms', 'platform_status', 'platform_listing_dates',
                     'platform_listing_expiry', 'last_relisted', 'external_refs', 'price_history',
                     mode='before')
    @classmethod
    def none_to_empty(cls, v, info):
        if v is None:
            return [] if info.field_name in ('images', 'tags', 'platforms', 'price_history') else {}
        return v

    @field_validator('platforms')
    @classmethod
    def unique_platforms(cls, v: List[str]) -> List[str]:
        # set semantics, first occurrence wins
        return list(dict.fromkeys(p for p in v if p))

    @model_validator(mode='after')
    def explicit_statuses(self):
        """Every platform the item is listed on carries an explicit status."""
        for platform in self.platforms:
            self.platform_status.setdefault(platform, ListingStatus.ACTIVE)
        return self

    @property
    def in_stock(self) -> bool:
        return self.qty > 0

    def status_for(self, platform: str) -> Optional[ListingStatus]:
        return self.platform_status.get(platform)

    def external_ref(self, platform: str) -> Dict[str, Any]:
        """Adapter-owned reference dict for a platform, created on first use."""
        return self.external_refs.setdefault(platform, {})
