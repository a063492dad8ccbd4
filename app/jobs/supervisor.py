"""Runs the external worker for a job and streams its output into the job log.

One supervisor task per job. The task is the only writer of the job's
lifecycle fields once the job has been registered.
"""

import asyncio
import codecs
import re
from typing import List, Optional, Sequence

from app.jobs.errors import ExitError, SpawnError
from app.jobs.models import Completed, JobOutcome, JobRecord, SpawnFailed

OUT = "out"
ERR = "err"

_READ_CHUNK = 4096
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class LineAssembler:
    """Turns a byte stream into complete text lines.

    Holds back the trailing fragment of each chunk (and any multi-byte
    character cut in half) until the rest of it arrives.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        text = self._pending + self._decoder.decode(chunk)
        parts = _LINE_BREAK.split(text)
        self._pending = parts.pop()
        # "\r\n" split across two chunks leaves an empty line behind
        return [p for p in parts if p]

    def finish(self) -> List[str]:
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [p for p in _LINE_BREAK.split(tail) if p]


class ProcessSupervisor:
    """Launches a worker process and drives its job to a terminal state."""

    def __init__(self, worker_name: str = "yt-dlp"):
        self._worker_name = worker_name

    async def start(self, job: JobRecord, command: Sequence[str]) -> None:
        """Run ``command`` for ``job`` to completion.

        Never raises for worker failures: they end up on the job as
        ``status == error``.
        """
        job.mark_running()
        job.log.append(OUT, f"▶ Starting {self._worker_name}...")
        print(f"  Job {job.id}: starting {self._worker_name}")

        try:
            outcome = await self.run(job, command)
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            job.mark_failed(message)
            job.log.append(ERR, message)
            print(f"  Job {job.id}: supervisor crashed: {message}")
            return

        self._apply(job, outcome)

    async def run(self, job: JobRecord, command: Sequence[str]) -> JobOutcome:
        """Spawn the worker, drain both streams, and wait for it to exit."""
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return SpawnFailed(reason=str(e) or "spawn error")

        drains = [
            asyncio.ensure_future(self._drain(process.stdout, job, OUT)),
            asyncio.ensure_future(self._drain(process.stderr, job, ERR)),
        ]
        try:
            await asyncio.gather(*drains)
            exit_code = await process.wait()
        finally:
            # a failed or cancelled drain must not keep writing to the log
            for drain in drains:
                drain.cancel()
            await asyncio.gather(*drains, return_exceptions=True)
            # still alive only if draining was interrupted
            if process.returncode is None:
                _kill(process)
                await process.wait()
        return Completed(exit_code=exit_code)

    async def _drain(self, stream: Optional[asyncio.StreamReader], job: JobRecord, tag: str) -> None:
        if stream is None:
            return
        assembler = LineAssembler()
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            for line in assembler.feed(chunk):
                job.log.append(tag, line)
        for line in assembler.finish():
            job.log.append(tag, line)

    def _apply(self, job: JobRecord, outcome: JobOutcome) -> None:
        if isinstance(outcome, SpawnFailed):
            error = SpawnError(outcome.reason)
            job.mark_failed(error.message)
            job.log.append(ERR, error.message)
            print(f"  Job {job.id}: spawn failed: {error.message}")
            return

        if outcome.exit_code == 0:
            job.mark_done(outcome.exit_code)
            job.log.append(OUT, "✅ Completed")
            print(f"  Job {job.id}: completed")
            return

        error = ExitError(outcome.exit_code, worker_name=self._worker_name)
        job.mark_failed(error.message, exit_code=outcome.exit_code)
        job.log.append(ERR, error.message)
        print(f"  Job {job.id}: {error.message}")


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
