from crosslist.integrations.base import MarketplaceAdapter
from crosslist.integrations.events import SaleEvent

__all__ = ["MarketplaceAdapter", "SaleEvent"]
