# tests/unit/test_scheduler.py
import pytest
from unittest.mock import AsyncMock

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from crosslist.core.config import Settings
from crosslist.core.enums import ListingStatus
from crosslist.core.exceptions import MarketplaceAPIError
from crosslist.scheduler import EXPIRY_JOB_ID, SyncScheduler, pull_job_id
from tests.mocks.mock_adapter import MockAdapter


@pytest.fixture
def scheduled_settings():
    return Settings(SYNC_SCHEDULE_ENABLED=True, SYNC_INTERVAL_SECONDS=120, EXPIRY_SWEEP_INTERVAL_MINUTES=30)


@pytest.fixture
def mock_adapter(lifecycle, store):
    return MockAdapter(lifecycle, store)


@pytest.fixture
def sync_scheduler(scheduled_settings, lifecycle, bulk, store, mock_adapter):
    # never started: jobs are only registered
    return SyncScheduler(scheduled_settings, lifecycle, bulk, store, {"Mock": mock_adapter}, AsyncIOScheduler())


"""
1. Pull job
"""

@pytest.mark.asyncio
async def test_run_pull_skips_disconnected_adapter(sync_scheduler, mock_adapter):
    await sync_scheduler.run_pull("Mock")
    await sync_scheduler.run_pull("Unknown")
    assert mock_adapter.calls == []


@pytest.mark.asyncio
async def test_run_pull_skips_busy_adapter(sync_scheduler, mock_adapter):
    await mock_adapter.connect()
    mock_adapter.syncing = True

    await sync_scheduler.run_pull("Mock")

    assert mock_adapter.calls == []


@pytest.mark.asyncio
async def test_run_pull_saves_store(sync_scheduler, mock_adapter, store, add_item, mocker):
    add_item("a", sku="SKU-A", platforms=["Mock"])
    mock_adapter.listings = [{"ref": "1", "sku": "SKU-A"}]
    await mock_adapter.connect()
    save = mocker.patch.object(store, "save", AsyncMock(return_value=1))

    await sync_scheduler.run_pull("Mock")

    assert mock_adapter.last_sync is not None
    save.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_pull_swallows_errors(sync_scheduler, mock_adapter, mocker):
    await mock_adapter.connect()
    mocker.patch.object(mock_adapter, "pull", AsyncMock(side_effect=MarketplaceAPIError("rate limited")))

    await sync_scheduler.run_pull("Mock")

    assert mock_adapter.connected is True


"""
2. Expiry sweep job
"""

@pytest.mark.asyncio
async def test_expiry_sweep(sync_scheduler, add_item, clock):
    add_item("a", platforms=["eBay"], platform_listing_dates={"eBay": "2024-01-01"}, platform_listing_expiry={"eBay": "2024-05-01"})

    result = await sync_scheduler.run_expiry_sweep()

    assert result.transitioned == 1
    assert result.auto_relisted == 0
    assert sync_scheduler.store.get("a").platform_status["eBay"] is ListingStatus.EXPIRED


@pytest.mark.asyncio
async def test_expiry_sweep_with_auto_relist(sync_scheduler, bulk, add_item, clock):
    add_item("a", platforms=["eBay"], platform_listing_dates={"eBay": "2024-01-01"}, platform_listing_expiry={"eBay": "2024-05-01"})
    bulk.auto_relist.enable()

    result = await sync_scheduler.run_expiry_sweep()

    item = sync_scheduler.store.get("a")
    assert (result.transitioned, result.auto_relisted) == (1, 1)
    assert item.platform_status["eBay"] is ListingStatus.ACTIVE
    assert item.last_relisted["eBay"] == clock()


"""
3. Job management
"""

@pytest.mark.asyncio
async def test_pull_job_follows_adapter_state(sync_scheduler, mock_adapter):
    await mock_adapter.connect()

    job = sync_scheduler.scheduler.get_job(pull_job_id("Mock"))
    assert job is not None
    assert job.trigger.interval.total_seconds() == 120

    await mock_adapter.disconnect()
    assert sync_scheduler.scheduler.get_job(pull_job_id("Mock")) is None


@pytest.mark.asyncio
async def test_no_jobs_when_schedule_disabled(settings, lifecycle, bulk, store, mock_adapter):
    sync_scheduler = SyncScheduler(settings, lifecycle, bulk, store, {"Mock": mock_adapter}, AsyncIOScheduler())

    await mock_adapter.connect()

    assert sync_scheduler.scheduler.get_jobs() == []


def test_pull_job_id():
    assert pull_job_id("eBay") == "pull_ebay"


def test_status_lists_jobs(sync_scheduler):
    sync_scheduler.add_pull_job("Mock")
    status = sync_scheduler.status()
    assert status["status"] == "stopped"
    assert [job["id"] for job in status["jobs"]] == ["pull_mock"]
    assert EXPIRY_JOB_ID == "expiry_sweep"
