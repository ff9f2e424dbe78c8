# crosslist/core/config.py

import os
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # eBay Sell APIs
    EBAY_ACCESS_TOKEN: str = ""
    EBAY_SANDBOX_MODE: bool = False # Change to True if in Sandbox test mode
    EBAY_MARKETPLACE_ID: str = "EBAY_US"
    EBAY_CURRENCY: str = "USD"
    EBAY_CONTENT_LANGUAGE: str = "en-US"
    EBAY_CATEGORY_ID: Optional[str] = None
    EBAY_MERCHANT_LOCATION_KEY: Optional[str] = None
    EBAY_FULFILLMENT_POLICY_ID: Optional[str] = None
    EBAY_PAYMENT_POLICY_ID: Optional[str] = None
    EBAY_RETURN_POLICY_ID: Optional[str] = None

    # Etsy Open API v3
    ETSY_API_KEY: str = ""
    ETSY_ACCESS_TOKEN: str = ""
    ETSY_SHOP_ID: str = ""
    ETSY_TAXONOMY_ID: Optional[int] = None
    ETSY_SHIPPING_PROFILE_ID: Optional[int] = None

    # Crosslisting lifecycle
    EXPIRY_WARNING_DAYS: int = 7
    AUTO_RELIST_ENABLED: bool = False

    # Scheduler
    SYNC_SCHEDULE_ENABLED: bool = True
    SYNC_INTERVAL_SECONDS: int = 300           # per-adapter pull, 5 minutes
    EXPIRY_SWEEP_INTERVAL_MINUTES: int = 60

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def ebay_configured(self) -> bool:
        return bool(self.EBAY_ACCESS_TOKEN)

    @property
    def etsy_configured(self) -> bool:
        return bool(self.ETSY_API_KEY and self.ETSY_ACCESS_TOKEN and self.ETSY_SHOP_ID)


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
