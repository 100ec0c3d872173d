# storefront/services/dashboard.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from storefront.config import Settings, settings as default_settings
from storefront.services.backend import BackendClient, BackendError
from storefront.services.inventory import build_report
from storefront.services.jobs import JobRunner
from storefront.services.polling import LatestOnlyPoller

logger = logging.getLogger(__name__)


class AdminDashboard:
    """
    Server-side state behind the admin panel: the latest inventory snapshot, the
    latest job statistics and the job runner. The snapshots are refreshed by
    latest-only pollers; due jobs are checked by a separate interval job.
    """

    def __init__(self, backend: BackendClient, cfg: Settings = default_settings):
        self.backend = backend
        self.cfg = cfg
        self.jobs = JobRunner(backend, rerun_minutes=cfg.JOB_RERUN_MINUTES,
                              notification_ttl=cfg.NOTIFICATION_TTL_SECONDS)
        self.inventory_payload: Optional[Dict[str, Any]] = None

        self.inventory_poller = LatestOnlyPoller(
            self._fetch_inventory, self._apply_inventory,
            interval=cfg.INVENTORY_POLL_SECONDS, name="inventory",
        )
        self.job_stats_poller = LatestOnlyPoller(
            self._fetch_job_stats, self.jobs.update_stats,
            interval=cfg.JOB_STATS_POLL_SECONDS, name="job-stats",
        )
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._checking = False

    async def _fetch_inventory(self) -> Dict[str, Any]:
        data = await self.backend.get_inventory()
        if not isinstance(data, dict) or not data.get("success"):
            raise BackendError("Failed to fetch inventory data")
        return data

    def _apply_inventory(self, data: Dict[str, Any]) -> None:
        self.inventory_payload = data

    async def _fetch_job_stats(self) -> Dict[str, Any]:
        data = await self.backend.get_job_stats()
        if not isinstance(data, dict) or not data.get("success"):
            raise BackendError("Failed to fetch job statistics")
        return data

    async def check_due_jobs(self) -> List[str]:
        """
        Run the jobs whose nextRun has passed. A tick that arrives while the
        previous check is still running is skipped, never cancelled.
        """
        if self._checking:
            logger.debug("Due-job check still running; tick skipped")
            return []
        self._checking = True
        try:
            return await self.jobs.run_due()
        finally:
            self._checking = False

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def start(self) -> None:
        """Start the pollers and the due-job check. Must be called from a running event loop."""
        if self.running:
            return
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.inventory_poller.schedule(self.scheduler)
        self.job_stats_poller.schedule(self.scheduler)
        self.scheduler.add_job(
            self.check_due_jobs,
            "interval",
            seconds=self.cfg.JOB_CHECK_SECONDS,
            id="job-check",
            next_run_time=datetime.now(timezone.utc),
            max_instances=2,
            coalesce=True,
        )
        self.scheduler.start()

    async def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        await self.inventory_poller.cancel()
        await self.job_stats_poller.cancel()

    async def refresh(self) -> None:
        await self.inventory_poller.refresh()
        await self.job_stats_poller.refresh()

    async def execute_job(self, queue: str) -> bool:
        if self.jobs.stats is None:
            await self.job_stats_poller.refresh()
        return await self.jobs.execute(queue)

    async def snapshot(self, search: Optional[str] = None, status: Optional[str] = "all",
                       channel: Optional[str] = "all") -> Dict[str, Any]:
        """Current dashboard view; fetches once if nothing has been loaded yet."""
        if self.inventory_payload is None:
            await self.inventory_poller.refresh()
        if self.jobs.stats is None:
            await self.job_stats_poller.refresh()

        inventory = None
        if self.inventory_payload is not None:
            inventory = build_report(self.inventory_payload, self.cfg, search=search, status=status, channel=channel)

        def _ts(poller):
            return poller.last_refresh.isoformat() if poller.last_refresh else None

        return {
            "success": True,
            "inventory": inventory,
            "jobStats": self.jobs.stats.to_dict() if self.jobs.stats else None,
            "executing": [q for q in ("inventory", "product") if self.jobs.is_executing(q)],
            "notifications": [n.to_dict() for n in self.jobs.notifications()],
            "lastRefresh": {
                "inventory": _ts(self.inventory_poller),
                "jobStats": _ts(self.job_stats_poller),
            },
            "errors": {
                "inventory": self.inventory_poller.last_error,
                "jobStats": self.job_stats_poller.last_error,
            },
        }
