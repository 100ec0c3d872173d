# storefront/models/jobs.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


@dataclass
class RecurringJobs:
    count: int = 0
    next_run: int = 0  # epoch milliseconds
    cron: str = ""

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "RecurringJobs":
        d = d or {}
        return cls(count=_to_int(d.get("count")), next_run=_to_int(d.get("nextRun")), cron=str(d.get("cron") or ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "nextRun": self.next_run, "cron": self.cron}


@dataclass
class QueueStats:
    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    delayed: int = 0
    status: str = "unknown"
    recurring_jobs: RecurringJobs = field(default_factory=RecurringJobs)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "QueueStats":
        d = d or {}
        return cls(
            waiting=_to_int(d.get("waiting")),
            active=_to_int(d.get("active")),
            completed=_to_int(d.get("completed")),
            failed=_to_int(d.get("failed")),
            delayed=_to_int(d.get("delayed")),
            status=str(d.get("status") or "unknown"),
            recurring_jobs=RecurringJobs.from_dict(d.get("recurringJobs")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "waiting": self.waiting,
            "active": self.active,
            "completed": self.completed,
            "failed": self.failed,
            "delayed": self.delayed,
            "status": self.status,
            "recurringJobs": self.recurring_jobs.to_dict(),
        }


@dataclass
class JobStats:
    """Background queue statistics as reported by the backend's /jobs/stats."""
    inventory: QueueStats = field(default_factory=QueueStats)
    product: QueueStats = field(default_factory=QueueStats)
    redis_status: str = "unknown"

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "JobStats":
        d = d or {}
        return cls(
            inventory=QueueStats.from_dict(d.get("inventory")),
            product=QueueStats.from_dict(d.get("product")),
            redis_status=str(d.get("redisStatus") or "unknown"),
        )

    def queue(self, name: str) -> QueueStats:
        if name == "inventory":
            return self.inventory
        if name == "product":
            return self.product
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inventory": self.inventory.to_dict(),
            "product": self.product.to_dict(),
            "redisStatus": self.redis_status,
        }
