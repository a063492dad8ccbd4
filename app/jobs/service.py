"""In-process download job service.

Every accepted job starts right away in its own asyncio task. Nothing is
persisted: jobs live in memory until the janitor evicts them.
"""

import asyncio
from typing import Callable, List, Optional, Set

from app.downloads.validation import sanitize_folder_name, validate_source_url
from app.jobs.dispatcher import JobDispatcher
from app.jobs.janitor import Janitor
from app.jobs.log_buffer import DEFAULT_MAX_LINES, LogBuffer
from app.jobs.errors import ValidationError
from app.jobs.models import JobPoll, JobRecord, JobSnapshot
from app.jobs.registry import JobRegistry
from app.jobs.supervisor import OUT, ProcessSupervisor
from app.storage.music_library import MusicLibrary

CommandFactory = Callable[[str, str], List[str]]


class JobService(JobDispatcher):
    """Validates download requests, runs them, and answers polls."""

    def __init__(
        self,
        library: MusicLibrary,
        command_factory: CommandFactory,
        registry: Optional[JobRegistry] = None,
        supervisor: Optional[ProcessSupervisor] = None,
        janitor: Optional[Janitor] = None,
        log_max_lines: int = DEFAULT_MAX_LINES,
    ):
        """
        command_factory: callable(source_url, folder) -> argv
            Builds the worker command for a validated request.
        """
        self._library = library
        self._command_factory = command_factory
        self._registry = registry or JobRegistry()
        self._supervisor = supervisor or ProcessSupervisor()
        self._janitor = janitor or Janitor(self._registry)
        self._log_max_lines = log_max_lines
        self._tasks: Set[asyncio.Task] = set()

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def janitor(self) -> Janitor:
        return self._janitor

    async def submit(self, source_url: str, folder: str) -> str:
        source_url = (source_url or "").strip()
        if not source_url or not validate_source_url(source_url):
            raise ValidationError("Invalid sourceUrl")

        folder = sanitize_folder_name(folder)
        if not folder:
            raise ValidationError("Invalid folder")

        # Create the folder up front so it shows up in listings immediately
        self._library.ensure_folder(folder)
        command = self._command_factory(source_url, folder)

        job = JobRecord(
            folder=folder,
            source_url=source_url,
            log=LogBuffer(max_lines=self._log_max_lines),
        )
        self._registry.create(job)
        job.log.append(OUT, f"Job queued: {job.id}")
        job.log.append(OUT, f"Folder: {folder}")

        # The task first runs on a later loop iteration, after this returns
        task = asyncio.create_task(self._supervisor.start(job, command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job.id

    async def poll(self, job_id: str, since: int = 0) -> JobPoll:
        job = self._registry.get(job_id)
        logs, next_since = job.log.read_from(since)
        return JobPoll(job=JobSnapshot.of(job), logs=logs, next_since=next_since)

    async def start(self) -> None:
        await self._janitor.start()

    async def stop(self) -> None:
        await self._janitor.stop()
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until every scheduled supervisor task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
