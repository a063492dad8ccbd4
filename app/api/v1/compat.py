"""Browser-extension compatibility API.

Provides the paths and payload shapes the extension already uses:
  GET  /api/music/folders        — bare list of folder names
  POST /api/youtube/download     — {youtubeUrl, folder} -> {ok, jobId}
  GET  /api/downloads/{job_id}   — poll in the extension's shape

This is a thin layer over the same dispatcher as /api/v1/downloads.
"""

import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.v1.downloads import get_dispatcher
from app.api.v1.folders import get_library
from app.auth.api_key import verify_api_key
from app.jobs.errors import ValidationError

router = APIRouter(dependencies=[Depends(verify_api_key)])


class YoutubeDownloadRequest(BaseModel):
    youtubeUrl: Optional[str] = ""
    folder: Optional[str] = ""


# ---------------------------------------------------------------------------
# GET /api/music/folders
# ---------------------------------------------------------------------------

@router.get("/music/folders")
async def music_folders():
    return get_library().list_folders()


# ---------------------------------------------------------------------------
# POST /api/youtube/download
# ---------------------------------------------------------------------------

@router.post("/youtube/download")
async def youtube_download(request: YoutubeDownloadRequest):
    """Start a download and return the job id before any work begins."""
    try:
        job_id = await get_dispatcher().submit(request.youtubeUrl or "", request.folder or "")
    except ValidationError as e:
        if e.message == "Invalid sourceUrl":
            raise ValidationError("Invalid youtubeUrl") from e
        raise
    return {"ok": True, "jobId": job_id}


# ---------------------------------------------------------------------------
# GET /api/downloads/{job_id}?since=<n>
# ---------------------------------------------------------------------------

@router.get("/downloads/{job_id}")
async def download_status(job_id: str, since: Optional[str] = None):
    """Status and incremental logs, timestamps in epoch milliseconds.

    ``since`` is read loosely: anything that is not a non-negative number
    counts as 0.
    """
    poll = await get_dispatcher().poll(job_id, _parse_since(since))
    job = poll.job
    return {
        "ok": True,
        "job": {
            "id": job.id,
            "status": job.status.value,
            "folder": job.folder,
            "youtubeUrl": job.source_url,
            "createdAt": _epoch_ms(job.created_at),
            "startedAt": _epoch_ms(job.started_at),
            "finishedAt": _epoch_ms(job.finished_at),
            "exitCode": job.exit_code,
            "error": job.error_message,
        },
        "logs": poll.logs,
        "nextSince": poll.next_since,
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_since(raw: Optional[str]) -> int:
    try:
        value = float(raw) if raw is not None else 0.0
    except ValueError:
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


def _epoch_ms(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(value.timestamp() * 1000)
