from crosslist.services.ebay.client import EbayClient

__all__ = ["EbayClient"]
