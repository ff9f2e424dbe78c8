from crosslist.services.etsy.client import EtsyClient

__all__ = ["EtsyClient"]
