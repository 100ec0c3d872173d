# storefront/services/jobs.py
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from storefront.models.jobs import JobStats
from storefront.services.backend import BackendClient, BackendError
from storefront.services.catalog import ProductFilters

logger = logging.getLogger(__name__)

QUEUES = ("inventory", "product")


class UnknownQueue(KeyError):
    pass


@dataclass
class Notification:
    id: str
    type: str  # "success" | "error"
    message: str
    timestamp: float  # epoch seconds

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "type": self.type, "message": self.message, "timestamp": self.timestamp}


class JobRunner:
    """
    Executes the dashboard's two recurring jobs on demand and keeps the local copy
    of the queue statistics in step with what was run:
      - inventory job: pull the inventory snapshot
      - product job: pull one page (limit=1) of the catalog
    Success bumps `completed`, failure bumps `failed`; both push nextRun forward.
    """

    def __init__(self, backend: BackendClient, rerun_minutes: int = 6, notification_ttl: float = 5.0,
                 clock: Callable[[], float] = time.time):
        self.backend = backend
        self.rerun_minutes = rerun_minutes
        self.notification_ttl = notification_ttl
        self._clock = clock
        self.stats: Optional[JobStats] = None
        self._executing: set = set()
        self._notifications: List[Notification] = []

    def update_stats(self, payload) -> None:
        """Accept a fresh /jobs/stats payload (envelope or bare stats dict)."""
        if isinstance(payload, JobStats):
            self.stats = payload
            return
        payload = payload or {}
        self.stats = JobStats.from_dict(payload.get("stats", payload))

    def is_executing(self, queue: str) -> bool:
        return queue in self._executing

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _notify(self, kind: str, message: str) -> None:
        self._notifications.append(Notification(uuid.uuid4().hex[:9], kind, message, self._clock()))

    def notifications(self) -> List[Notification]:
        """Notifications younger than the TTL; expired ones are dropped."""
        cutoff = self._clock() - self.notification_ttl
        self._notifications = [n for n in self._notifications if n.timestamp > cutoff]
        return list(self._notifications)

    async def _run_job(self, queue: str) -> None:
        if queue == "inventory":
            await self.backend.get_inventory()
        else:
            await self.backend.fetch_products(ProductFilters(limit=1, offset=0))

    async def execute(self, queue: str) -> bool:
        """
        Run one job. Returns True on success, False on failure or when the queue
        is already executing.
        """
        if queue not in QUEUES:
            raise UnknownQueue(queue)
        if queue in self._executing:
            logger.info("%s job already executing; skipped", queue)
            return False

        label = queue.capitalize()
        self._executing.add(queue)
        try:
            logger.info("Executing %s job...", queue)
            try:
                await self._run_job(queue)
            except BackendError as exc:
                if exc.status_code is not None:
                    logger.error("%s job failed: %s", label, exc.status_code)
                    self._notify("error", f"{label} job failed")
                else:
                    logger.error("%s job execution error: %s", label, exc)
                    self._notify("error", f"{label} job execution error")
                self._record(queue, ok=False)
                return False
            logger.info("%s job completed", label)
            self._notify("success", f"{label} job completed successfully")
            self._record(queue, ok=True)
            return True
        finally:
            self._executing.discard(queue)

    def _record(self, queue: str, ok: bool) -> None:
        if self.stats is None:
            return
        q = self.stats.queue(queue)
        if ok:
            q.completed += 1
        else:
            q.failed += 1
        q.recurring_jobs.next_run = self.now_ms() + self.rerun_minutes * 60 * 1000

    def due_queues(self, now_ms: Optional[int] = None) -> List[str]:
        if self.stats is None:
            return []
        now_ms = self.now_ms() if now_ms is None else now_ms
        return [q for q in QUEUES if self.stats.queue(q).recurring_jobs.next_run <= now_ms]

    async def run_due(self) -> List[str]:
        """Execute every queue whose next run is due; returns the queues that ran."""
        ran = []
        for queue in self.due_queues():
            if queue in self._executing:
                continue
            await self.execute(queue)
            ran.append(queue)
        return ran
