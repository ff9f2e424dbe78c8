"""
Marketplace adapter endpoints under /api/platforms/{platform}.

Adapter results come back as-is (success=False with a reason for marketplace
failures on push / publish / end / relist); errors that stop an operation
before it reaches the marketplace map to HTTP errors.
"""

import logging

from fastapi import APIRouter, Depends

from crosslist.core.exceptions import BaseServiceError
from crosslist.dependencies import get_adapter, http_error
from crosslist.integrations.base import MarketplaceAdapter
from crosslist.schemas.platform import AdapterResult, AdapterStatus, PullResult

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/platforms/{platform}", tags=["platforms"])


@router.get("/status", response_model=AdapterStatus)
async def adapter_status(adapter: MarketplaceAdapter = Depends(get_adapter)):
    return adapter.status()


@router.post("/connect", response_model=AdapterStatus)
async def connect(adapter: MarketplaceAdapter = Depends(get_adapter)):
    try:
        await adapter.connect()
    except BaseServiceError as e:
        logger.error(f"{adapter.platform} connect failed: {e}")
        raise http_error(e)
    return adapter.status()


@router.post("/disconnect", response_model=AdapterStatus)
async def disconnect(adapter: MarketplaceAdapter = Depends(get_adapter)):
    await adapter.disconnect()
    return adapter.status()


@router.post("/pull", response_model=PullResult)
async def pull(adapter: MarketplaceAdapter = Depends(get_adapter)):
    try:
        result = await adapter.pull()
    except BaseServiceError as e:
        raise http_error(e)
    await adapter.store.save()
    return result


async def _item_action(adapter: MarketplaceAdapter, action: str, item_id: str) -> AdapterResult:
    try:
        result = await getattr(adapter, action)(item_id)
    except BaseServiceError as e:
        raise http_error(e)
    if result.success:
        await adapter.store.save()
    return result


@router.post("/items/{item_id}/push", response_model=AdapterResult)
async def push(item_id: str, adapter: MarketplaceAdapter = Depends(get_adapter)):
    return await _item_action(adapter, "push", item_id)


@router.post("/items/{item_id}/publish", response_model=AdapterResult)
async def publish(item_id: str, adapter: MarketplaceAdapter = Depends(get_adapter)):
    return await _item_action(adapter, "publish", item_id)


@router.post("/items/{item_id}/end", response_model=AdapterResult)
async def end(item_id: str, adapter: MarketplaceAdapter = Depends(get_adapter)):
    return await _item_action(adapter, "end", item_id)


@router.post("/items/{item_id}/relist", response_model=AdapterResult)
async def relist(item_id: str, adapter: MarketplaceAdapter = Depends(get_adapter)):
    return await _item_action(adapter, "relist", item_id)
