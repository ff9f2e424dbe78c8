class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class LifecycleError(BaseServiceError):
    """Base exception for listing lifecycle errors."""
    pass

class ItemNotFoundError(LifecycleError):
    """Raised when an inventory item is not found."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")

class InvalidStatusError(LifecycleError):
    """Raised when a status value is not a known listing status."""
    pass

class ListingValidationError(LifecycleError):
    """Raised when an item is not in a state that allows the requested listing action."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass

class AdapterNotConnectedError(PlatformServiceError):
    """Raised when an adapter operation is invoked while disconnected."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"{platform} not connected")

class SyncInProgressError(PlatformServiceError):
    """Raised when an adapter is already running a pull or push."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"{platform} sync already in progress")

class MarketplaceAPIError(PlatformServiceError):
    """Raised when a marketplace API call fails."""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)

class EbayAPIError(MarketplaceAPIError):
    """Raised when eBay API calls fail."""
    pass

class EtsyAPIError(MarketplaceAPIError):
    """Raised when Etsy API calls fail."""
    pass
