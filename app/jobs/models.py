"""Job record data model for async download jobs."""

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.jobs.errors import InvalidTransitionError
from app.jobs.log_buffer import LogBuffer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_job_id() -> str:
    """32 hex chars from the OS CSPRNG."""
    return secrets.token_hex(16)


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)


@dataclass(frozen=True)
class Completed:
    """The worker ran and exited with ``exit_code``."""
    exit_code: int


@dataclass(frozen=True)
class SpawnFailed:
    """The worker could not be started."""
    reason: str


JobOutcome = Union[Completed, SpawnFailed]


class JobRecord(BaseModel):
    """Tracks the lifecycle of one download job.

    Lifecycle fields only change through the ``mark_*`` methods, which
    enforce ``queued -> running -> done | error``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(default_factory=new_job_id, frozen=True)
    folder: str = Field(frozen=True)
    source_url: str = Field(frozen=True)
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    exit_code: Optional[int] = None
    error_message: Optional[str] = None
    log: LogBuffer = Field(default_factory=LogBuffer, exclude=True)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def mark_running(self) -> None:
        self._require(JobStatus.QUEUED, JobStatus.RUNNING)
        self.status = JobStatus.RUNNING
        self.started_at = utcnow()

    def mark_done(self, exit_code: int) -> None:
        self._require(JobStatus.RUNNING, JobStatus.DONE)
        self.exit_code = exit_code
        self.status = JobStatus.DONE
        self.finished_at = utcnow()

    def mark_failed(self, message: str, exit_code: Optional[int] = None) -> None:
        self._require(JobStatus.RUNNING, JobStatus.ERROR)
        self.exit_code = exit_code
        self.error_message = message
        self.status = JobStatus.ERROR
        self.finished_at = utcnow()

    def _require(self, expected: JobStatus, target: JobStatus) -> None:
        if self.status != expected:
            raise InvalidTransitionError(
                f"Job {self.id} cannot go from {self.status.value} to {target.value}"
            )


class JobSnapshot(BaseModel):
    """All non-log fields of a job at the moment it was polled."""
    id: str
    status: JobStatus
    folder: str
    source_url: str
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    exit_code: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def of(cls, job: JobRecord) -> "JobSnapshot":
        return cls(**job.model_dump())


class JobPoll(BaseModel):
    job: JobSnapshot
    logs: List[str]
    next_since: int
