"""Download job API — submit jobs, poll status and incremental logs."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from app.auth.api_key import verify_api_key
from app.jobs.models import JobPoll

router = APIRouter(dependencies=[Depends(verify_api_key)])

# Set by main.py during lifespan
_dispatcher = None


def set_dispatcher(dispatcher):
    global _dispatcher
    _dispatcher = dispatcher


def get_dispatcher():
    if _dispatcher is None:
        raise HTTPException(status_code=503, detail="Job dispatcher not initialized")
    return _dispatcher


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_url: str = Field("", alias="sourceUrl")
    folder: str = ""


class DownloadResponse(BaseModel):
    ok: bool = True
    jobId: str


@router.post("/downloads", response_model=DownloadResponse)
async def submit_download(request: DownloadRequest):
    """Start a download job. Returns as soon as the job is registered."""
    job_id = await get_dispatcher().submit(request.source_url, request.folder)
    return DownloadResponse(jobId=job_id)


@router.get("/downloads/{job_id}")
async def poll_download(job_id: str, since: int = Query(0, ge=0)):
    """Job status plus log lines from cursor ``since``.

    Pass the returned ``nextSince`` as ``since`` on the next poll.
    """
    poll = await get_dispatcher().poll(job_id, since)
    return poll_payload(poll)


def poll_payload(poll: JobPoll) -> dict:
    job = poll.job
    return {
        "ok": True,
        "job": {
            "id": job.id,
            "status": job.status.value,
            "folder": job.folder,
            "sourceUrl": job.source_url,
            "createdAt": job.created_at.isoformat(),
            "startedAt": job.started_at.isoformat() if job.started_at else None,
            "finishedAt": job.finished_at.isoformat() if job.finished_at else None,
            "exitCode": job.exit_code,
            "errorMessage": job.error_message,
        },
        "logs": poll.logs,
        "nextSince": poll.next_since,
    }
