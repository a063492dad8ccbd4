"""Error types raised by the job service.

Only errors on the request path are raised to callers. Worker failures
(SpawnError, ExitError) are recorded on the job and surfaced through polling.
"""


class JobServiceError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JobServiceError):
    status_code = 400


class NotFoundError(JobServiceError):
    status_code = 404


class ConflictError(JobServiceError):
    status_code = 409


class InternalError(JobServiceError):
    status_code = 500


class InvalidTransitionError(JobServiceError):
    """A job was asked to move to a state it cannot reach from its current one."""

    status_code = 500


class SpawnError(JobServiceError):
    """The worker process could not be launched."""


class ExitError(JobServiceError):
    """The worker process exited with a non-zero code."""

    def __init__(self, exit_code: int, worker_name: str = "yt-dlp"):
        super().__init__(f"{worker_name} failed (code {exit_code})")
        self.exit_code = exit_code
