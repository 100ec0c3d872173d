from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[Any]]
Apply = Callable[[Any], None]
ErrorHook = Callable[[str, BaseException], None]


class LatestOnlyPoller:
    """
    Periodic fetch where only the newest request may update state.

      - refresh() cancels any in-flight fetch of the same poller before starting a new one
      - a result is applied only if no newer refresh was started meanwhile
      - schedule() fires refresh() every `interval` seconds whether or not the previous one finished

    Only meant for reads: a superseded fetch is cancelled mid-flight.

    Usage:
      poller = LatestOnlyPoller(backend.get_inventory, apply_inventory, interval=30, name="inventory")
      await poller.refresh()      # one-off
      poller.schedule(scheduler); scheduler.start(); ...; await poller.cancel()
    """

    def __init__(self, fetch: Fetch, apply: Optional[Apply] = None, interval: float = 30.0,
                 name: str = "poller", on_error: Optional[ErrorHook] = None):
        self._fetch = fetch
        self._apply = apply
        self.interval = float(interval)
        self.name = name
        self._on_error = on_error
        self._seq = 0
        self._inflight: Optional[asyncio.Future] = None
        self.last_result: Any = None
        self.last_refresh: Optional[datetime] = None
        self.last_error: Optional[str] = None

    async def refresh(self) -> Any:
        """
        Fetch now. Returns the applied result, or None if the fetch failed or was
        superseded by a newer refresh.
        """
        self._seq += 1
        seq = self._seq
        previous = self._inflight
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(self._fetch())
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if seq != self._seq:
                logger.debug("%s: request %d superseded", self.name, seq)
                return None
            raise
        except Exception as exc:
            if seq == self._seq:
                self.last_error = str(exc)
                self._report(exc)
            return None

        if seq != self._seq:
            logger.debug("%s: dropping stale response %d (latest %d)", self.name, seq, self._seq)
            return None

        self.last_result = result
        self.last_refresh = datetime.now(timezone.utc)
        self.last_error = None
        if self._apply is not None:
            self._apply(result)
        return result

    def _report(self, exc: BaseException) -> None:
        if self._on_error is not None:
            self._on_error(self.name, exc)
        else:
            logger.warning("%s refresh failed: %s", self.name, exc)

    def schedule(self, scheduler: AsyncIOScheduler) -> Job:
        """
        Register refresh() as an interval job, first run immediately. Ticks may
        overlap; the newer one cancels the older fetch.
        """
        logger.info("%s polling every %.0fs", self.name, self.interval)
        return scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self.interval,
            id=self.name,
            next_run_time=datetime.now(timezone.utc),
            max_instances=3,
            coalesce=True,
        )

    async def cancel(self) -> None:
        """Cancel the in-flight fetch, if any. Its refresh() returns None."""
        self._seq += 1
        task = self._inflight
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
