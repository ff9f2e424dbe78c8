"""
FastAPI dependencies.

The engine objects are built once in the app lifespan and hung on
app.state; these accessors hand them to the routes.
"""

from fastapi import HTTPException, Request

from crosslist.core.config import Settings
from crosslist.core.exceptions import (
    AdapterNotConnectedError,
    BaseServiceError,
    ItemNotFoundError,
    LifecycleError,
    MarketplaceAPIError,
    SyncInProgressError,
)
from crosslist.integrations.base import MarketplaceAdapter
from crosslist.services.bulk import BulkOperationService
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.store import InventoryStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> InventoryStore:
    return request.app.state.store


def get_lifecycle(request: Request) -> ListingLifecycleService:
    return request.app.state.lifecycle


def get_bulk(request: Request) -> BulkOperationService:
    return request.app.state.bulk


def get_adapter(platform: str, request: Request) -> MarketplaceAdapter:
    """Adapter by platform name, case-insensitive (`ebay`, `eBay`, `etsy`)"""
    adapters = request.app.state.adapters
    for name, adapter in adapters.items():
        if name.lower() == platform.lower():
            return adapter
    raise HTTPException(status_code=404, detail=f"No adapter configured for {platform}")


def http_error(exc: Exception) -> HTTPException:
    """Translate a service error into the HTTP error the API returns for it"""
    if isinstance(exc, ItemNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (AdapterNotConnectedError, SyncInProgressError)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, MarketplaceAPIError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, (LifecycleError, ValueError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, BaseServiceError):
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=500, detail="Internal error")
