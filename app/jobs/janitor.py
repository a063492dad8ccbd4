"""Periodic eviction of finished jobs."""

import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

from app.jobs.models import JobRecord, utcnow
from app.jobs.registry import JobRegistry


class Janitor:
    """Removes terminal jobs once they are older than the retention window.

    Jobs that never reach a terminal state are kept forever.
    """

    def __init__(
        self,
        registry: JobRegistry,
        ttl: timedelta = timedelta(hours=2),
        interval_seconds: float = 60.0,
    ):
        self._registry = registry
        self._ttl = ttl
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Delete expired terminal jobs. Returns count of removed jobs."""
        now = now or utcnow()
        expired: List[str] = []

        def visit(job: JobRecord) -> None:
            if job.is_terminal and job.finished_at and now - job.finished_at > self._ttl:
                expired.append(job.id)

        self._registry.for_each(visit)
        for job_id in expired:
            self._registry.delete(job_id)
        return len(expired)

    async def start(self) -> None:
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            removed = self.sweep()
            if removed:
                print(f"  Janitor: evicted {removed} finished job(s)")
