"""Job dispatcher interface."""

from abc import ABC, abstractmethod

from app.jobs.models import JobPoll


class JobDispatcher(ABC):
    """Abstract interface the HTTP layer talks to."""

    @abstractmethod
    async def submit(self, source_url: str, folder: str) -> str:
        """Register a download job and schedule it. Returns job_id."""
        ...

    @abstractmethod
    async def poll(self, job_id: str, since: int = 0) -> JobPoll:
        """Current job state plus log lines from cursor ``since``."""
        ...

    @abstractmethod
    async def start(self) -> None:
        """Start background work (e.g., the janitor)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the dispatcher gracefully."""
        ...
