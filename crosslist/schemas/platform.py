"""
Schemas for marketplace sync adapter results.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from crosslist.core.enums import AdapterState


class PullResult(BaseModel):
    matched: int = 0
    unmatched: int = 0
    updated: int = 0
    sold: int = 0
    errors: List[str] = []


class AdapterResult(BaseModel):
    """Outcome of a push / publish / end / relist against one marketplace."""
    success: bool
    external_ref: Optional[str] = None
    reason: Optional[str] = None
    is_draft: bool = False


class AdapterStatus(BaseModel):
    platform: str
    state: AdapterState
    syncing: bool
    last_sync: Optional[datetime] = None


class RemoteListing(BaseModel):
    """A marketplace listing reduced to what pull reconciliation reads."""
    ref: Optional[str] = None            # value stored under the adapter's reference key
    sku: Optional[str] = None
    quantity: Optional[int] = None
    title: Optional[str] = None
    upc: Optional[str] = None
    images: List[str] = []
    price: Optional[float] = None
    tags: List[str] = []


class RemoteOrderLine(BaseModel):
    """One line of a marketplace order; `key` is unique per line per marketplace."""
    key: str
    ref: Optional[str] = None
    sku: Optional[str] = None
    quantity: int = 1
    price: Optional[float] = None
