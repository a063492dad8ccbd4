"""Music Downloader Backend - FastAPI application."""

import re
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.api.v1.router import v1_router, compat_router_api
from app.api.v1.health import router as health_root_router
from app.api.v1 import downloads as downloads_api
from app.api.v1 import folders as folders_api
from app.downloads.ytdlp import build_ytdlp_command
from app.jobs.errors import JobServiceError
from app.jobs.janitor import Janitor
from app.jobs.registry import JobRegistry
from app.jobs.service import JobService
from app.middleware.body_limit import BodySizeLimitMiddleware
from app.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from app.storage.music_library import MusicLibrary


def build_download_command(source_url: str, folder: str) -> List[str]:
    """Worker command for a validated request, using the current settings."""
    return build_ytdlp_command(source_url, folder, settings)


# Global service reference
_service: Optional[JobService] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    global _service

    if not settings.api_key.strip():
        raise RuntimeError("Missing API_KEY in env")

    print(f"Starting Music Downloader Backend on port {settings.port}")
    print(f"MUSIC_ROOT={settings.music_root}")
    print(f"YTDLP_CONTAINER={settings.ytdlp_container}")

    library = MusicLibrary(settings.music_root)
    if not library.exists():
        print(f"Warning: MUSIC_ROOT {settings.music_root} does not exist")

    registry = JobRegistry()
    janitor = Janitor(
        registry,
        ttl=timedelta(hours=settings.job_ttl_hours),
        interval_seconds=settings.janitor_interval_seconds,
    )
    _service = JobService(
        library=library,
        command_factory=build_download_command,
        registry=registry,
        janitor=janitor,
        log_max_lines=settings.job_log_max_lines,
    )
    await _service.start()
    print("Job service started")

    # Wire service and library into API endpoints
    downloads_api.set_dispatcher(_service)
    folders_api.set_library(library)

    yield

    # Shutdown
    print("Shutting down Music Downloader Backend")
    await _service.stop()
    downloads_api.set_dispatcher(None)
    folders_api.set_library(None)
    _service = None


def cors_options(rules: List[str]) -> Tuple[List[str], Optional[str]]:
    """Split origin rules into exact origins and a regex for "prefix*" rules.

    No rules means every origin is allowed.
    """
    if not rules:
        return ["*"], None
    exact = [r for r in rules if not r.endswith("*")]
    prefixes = [re.escape(r[:-1]) for r in rules if r.endswith("*")]
    regex = f"^(?:{'|'.join(prefixes)}).*$" if prefixes else None
    return exact, regex


app = FastAPI(
    title="Music Downloader Service",
    description="Queues yt-dlp downloads into the music library and streams their logs",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(JobServiceError)
async def job_service_error_handler(request: Request, exc: JobServiceError):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.message})


rate_limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)

# Last added runs first: CORS, then the rate limit, then the body cap
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
app.add_middleware(RateLimitMiddleware, limiter=rate_limiter, trust_proxy=settings.trust_proxy_headers)

_allow_origins, _allow_origin_regex = cors_options(settings.cors_origin_rules())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allow_origins,
    allow_origin_regex=_allow_origin_regex,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(health_root_router, tags=["health"])  # GET /health at root
app.include_router(v1_router)  # All /api/v1/* endpoints
app.include_router(compat_router_api)  # /api/* paths used by the extension


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
