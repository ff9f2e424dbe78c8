"""
Core module exports.
"""
from .enums import (
    ListingStatus,
    AdapterState,
    AdjustType,
)

from .exceptions import (
    BaseServiceError,
    LifecycleError,
    ItemNotFoundError,
    InvalidStatusError,
    ListingValidationError,
    PlatformServiceError,
    AdapterNotConnectedError,
    SyncInProgressError,
    MarketplaceAPIError,
    EbayAPIError,
    EtsyAPIError,
)

from .expiry_rules import (
    ExpiryRule,
    PLATFORM_EXPIRY_RULES,
    get_expiry_rule,
)
