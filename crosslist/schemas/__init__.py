from .item import InventoryItem, PriceHistoryEntry
from .crosslist import (
    ListingExpiry,
    ListingHealth,
    FleetStats,
    SaleResult,
    SweepResult,
    BulkResult,
    BulkPriceResult,
    PriceAdjustFilter,
    PriceAdjustment,
)
from .platform import PullResult, AdapterResult, AdapterStatus, RemoteListing, RemoteOrderLine
