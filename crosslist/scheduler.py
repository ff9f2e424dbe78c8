"""
Scheduled tasks for the crosslisting engine.

One interval job per connected marketplace adapter runs its pull; the job is
added when the adapter connects and removed when it disconnects. A separate
interval job sweeps expired listings, runs auto-relist when it is enabled and
flushes the store.
"""

import logging
from datetime import datetime
from typing import Dict, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from crosslist.core.config import Settings
from crosslist.integrations.base import MarketplaceAdapter
from crosslist.schemas.crosslist import SweepResult
from crosslist.services.bulk import BulkOperationService
from crosslist.services.lifecycle import ListingLifecycleService
from crosslist.store import ItemRepository

logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "expiry_sweep"


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.debug(f"Job {event.job_id} executed successfully at {datetime.now()}")


def pull_job_id(platform: str) -> str:
    return f"pull_{platform.lower()}"


class SyncScheduler:

    def __init__(
        self,
        settings: Settings,
        lifecycle: ListingLifecycleService,
        bulk: BulkOperationService,
        store: ItemRepository,
        adapters: Optional[Dict[str, MarketplaceAdapter]] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.settings = settings
        self.lifecycle = lifecycle
        self.bulk = bulk
        self.store = store
        self.adapters = adapters or {}
        self.scheduler = scheduler or AsyncIOScheduler()
        self.scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

        for adapter in self.adapters.values():
            adapter.add_state_listener(self.on_adapter_state)

    # ── Jobs ──────────────────────────────────────────────────────────────

    async def run_pull(self, platform: str) -> None:
        """Pull one marketplace if it is connected and idle. Failures are logged, never raised."""
        adapter = self.adapters.get(platform)
        if adapter is None or not adapter.connected or adapter.syncing:
            logger.debug(f"Skipping {platform} pull")
            return
        try:
            await adapter.pull()
        except Exception as e:
            logger.warning(f"{platform} scheduled sync error: {e}")
            return
        await self.store.save()

    async def run_expiry_sweep(self) -> SweepResult:
        """Sweep expired listings, auto-relist if enabled, then save."""
        result = SweepResult(transitioned=self.lifecycle.sweep_expired())
        if self.bulk.auto_relist.enabled:
            result.auto_relisted = self.bulk.auto_relist.run().processed
        await self.store.save()
        return result

    # ── Job management ────────────────────────────────────────────────────

    def on_adapter_state(self, adapter: MarketplaceAdapter) -> None:
        if adapter.connected:
            self.add_pull_job(adapter.platform)
        else:
            self.remove_pull_job(adapter.platform)

    def add_pull_job(self, platform: str) -> None:
        if not self.settings.SYNC_SCHEDULE_ENABLED:
            return
        self.scheduler.add_job(
            self.run_pull,
            IntervalTrigger(seconds=self.settings.SYNC_INTERVAL_SECONDS),
            args=[platform],
            id=pull_job_id(platform),
            name=f"Pull {platform}",
            replace_existing=True,
            max_instances=1,
        )
        logger.info(f"Scheduled {platform} pull every {self.settings.SYNC_INTERVAL_SECONDS}s")

    def remove_pull_job(self, platform: str) -> None:
        if self.scheduler.get_job(pull_job_id(platform)) is not None:
            self.scheduler.remove_job(pull_job_id(platform))
            logger.info(f"Removed {platform} pull job")

    def start(self) -> None:
        self.scheduler.add_job(
            self.run_expiry_sweep,
            IntervalTrigger(minutes=self.settings.EXPIRY_SWEEP_INTERVAL_MINUTES),
            id=EXPIRY_JOB_ID,
            name="Expiry sweep",
            replace_existing=True,
            max_instances=1,
        )
        for adapter in self.adapters.values():
            if adapter.connected:
                self.add_pull_job(adapter.platform)

        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started successfully")
            for job in self.scheduler.get_jobs():
                logger.info(f"  - {job.name}: {job.trigger}")

    def stop(self) -> None:
        """Stop the scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped successfully")

    def status(self) -> Dict:
        """Get current scheduler status and job information"""
        jobs_info = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs_info.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            })
        return {
            "status": "running" if self.scheduler.running else "stopped",
            "jobs": jobs_info,
        }
