"""
Unit tests for app/jobs/janitor.py
"""
import asyncio
from datetime import timedelta

import pytest

from app.jobs.janitor import Janitor
from app.jobs.models import utcnow
from app.jobs.registry import JobRegistry


def _ids(registry):
    return {job.id for job in registry.snapshot()}


def _finished(make_job, hours_ago, failed=False):
    job = make_job()
    job.mark_running()
    if failed:
        job.mark_failed("yt-dlp failed (code 1)", exit_code=1)
    else:
        job.mark_done(0)
    job.finished_at = utcnow() - timedelta(hours=hours_ago)
    return job


def test_sweep_removes_only_expired_terminal_jobs(make_job):
    registry = JobRegistry()
    old_done = _finished(make_job, hours_ago=3)
    old_error = _finished(make_job, hours_ago=5, failed=True)
    recent_done = _finished(make_job, hours_ago=1)
    stuck_running = make_job()
    stuck_running.mark_running()
    stuck_running.started_at = utcnow() - timedelta(days=3)
    queued = make_job()
    queued.created_at = utcnow() - timedelta(days=3)

    for job in (old_done, old_error, recent_done, stuck_running, queued):
        registry.create(job)

    removed = Janitor(registry, ttl=timedelta(hours=2)).sweep()

    assert removed == 2
    assert old_done.id not in _ids(registry)
    assert old_error.id not in _ids(registry)
    assert recent_done.id in _ids(registry)
    assert stuck_running.id in _ids(registry)
    assert queued.id in _ids(registry)


def test_sweep_uses_given_clock(make_job):
    registry = JobRegistry()
    job = _finished(make_job, hours_ago=0)
    registry.create(job)
    janitor = Janitor(registry, ttl=timedelta(hours=2))

    assert janitor.sweep(now=job.finished_at + timedelta(hours=1)) == 0
    assert janitor.sweep(now=job.finished_at + timedelta(hours=2)) == 0
    assert janitor.sweep(now=job.finished_at + timedelta(hours=2, seconds=1)) == 1
    assert len(registry) == 0


def test_sweep_on_empty_registry():
    assert Janitor(JobRegistry()).sweep() == 0


@pytest.mark.asyncio
async def test_background_loop_sweeps_periodically(make_job):
    registry = JobRegistry()
    job = _finished(make_job, hours_ago=1)
    registry.create(job)
    janitor = Janitor(registry, ttl=timedelta(minutes=1), interval_seconds=0.01)

    await janitor.start()
    try:
        for _ in range(100):
            if job.id not in _ids(registry):
                break
            await asyncio.sleep(0.01)
    finally:
        await janitor.stop()

    assert job.id not in _ids(registry)


@pytest.mark.asyncio
async def test_stop_without_start_is_safe():
    await Janitor(JobRegistry()).stop()
