"""
Shared enums and constants used across the application.
"""

from enum import Enum


class ListingStatus(str, Enum):
    """Status of one item on one marketplace. Current state only, never a history."""
    ACTIVE = "active"
    SOLD = "sold"
    SOLD_ELSEWHERE = "sold-elsewhere"
    DELISTED = "delisted"
    EXPIRED = "expired"
    DRAFT = "draft"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class AdapterState(str, Enum):
    """Connection state of a marketplace sync adapter"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class AdjustType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


class PriceSource(str, Enum):
    MANUAL = "manual"
    REPRICING = "repricing"
    SOLD = "sold"


# Marketplace display names used as platform keys on the item record
EBAY = "eBay"
ETSY = "Etsy"
