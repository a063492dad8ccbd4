"""In-memory job registry shared by request handlers and the janitor."""

import threading
from typing import Callable, Dict, List

from app.jobs.errors import ConflictError, NotFoundError
from app.jobs.models import JobRecord


class JobRegistry:
    """Maps job ids to records.

    The lock covers dict operations only. Record fields are owned by the
    job's supervisor task and are never touched while the lock is held.
    """

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def create(self, job: JobRecord) -> None:
        with self._lock:
            if job.id in self._jobs:
                raise ConflictError(f"Job {job.id} already exists")
            self._jobs[job.id] = job

    def get(self, job_id: str) -> JobRecord:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    def for_each(self, visitor: Callable[[JobRecord], None]) -> None:
        """Call ``visitor`` on a snapshot of the current jobs.

        The visitor runs outside the lock, so it may call ``delete``.
        """
        for job in self.snapshot():
            visitor(job)

    def snapshot(self) -> List[JobRecord]:
        with self._lock:
            return list(self._jobs.values())

    def delete(self, job_id: str) -> None:
        with self._lock:
            self._jobs.pop(job_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
