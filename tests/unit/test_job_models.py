"""
Unit tests for app/jobs/models.py

Status only moves queued -> running -> done | error.
"""
import re

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.jobs.errors import InvalidTransitionError
from app.jobs.models import JobSnapshot, JobStatus, new_job_id


def test_new_job_is_queued(make_job):
    job = make_job()

    assert job.status == JobStatus.QUEUED
    assert re.fullmatch(r"[0-9a-f]{32}", job.id)
    assert job.created_at is not None
    assert job.started_at is None
    assert job.finished_at is None
    assert job.exit_code is None
    assert job.error_message is None
    assert not job.is_terminal


def test_job_ids_are_unique():
    ids = {new_job_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_running_then_done(make_job):
    job = make_job()
    job.mark_running()
    assert job.status == JobStatus.RUNNING
    assert job.started_at is not None
    assert job.finished_at is None

    job.mark_done(0)
    assert job.status == JobStatus.DONE
    assert job.exit_code == 0
    assert job.finished_at >= job.started_at
    assert job.error_message is None
    assert job.is_terminal


def test_running_then_failed_with_exit_code(make_job):
    job = make_job()
    job.mark_running()
    job.mark_failed("yt-dlp failed (code 2)", exit_code=2)

    assert job.status == JobStatus.ERROR
    assert job.exit_code == 2
    assert job.error_message == "yt-dlp failed (code 2)"
    assert job.finished_at is not None


def test_failed_without_exit_code_leaves_it_unset(make_job):
    job = make_job()
    job.mark_running()
    job.mark_failed("No such file or directory")

    assert job.exit_code is None
    assert job.status == JobStatus.ERROR


@pytest.mark.parametrize("action", [
    lambda job: job.mark_done(0),
    lambda job: job.mark_failed("boom"),
])
def test_queued_job_cannot_skip_running(make_job, action):
    job = make_job()
    with pytest.raises(InvalidTransitionError):
        action(job)
    assert job.status == JobStatus.QUEUED
    assert job.finished_at is None


@pytest.mark.parametrize("action", [
    lambda job: job.mark_running(),
    lambda job: job.mark_done(0),
    lambda job: job.mark_failed("again"),
])
def test_terminal_job_is_final(make_job, action):
    job = make_job()
    job.mark_running()
    job.mark_done(0)
    finished_at = job.finished_at

    with pytest.raises(InvalidTransitionError):
        action(job)
    assert job.status == JobStatus.DONE
    assert job.finished_at == finished_at


def test_cannot_start_twice(make_job):
    job = make_job()
    job.mark_running()
    with pytest.raises(InvalidTransitionError):
        job.mark_running()


@pytest.mark.parametrize("field, value", [
    ("id", "f" * 32),
    ("folder", "Rock"),
    ("source_url", "https://youtu.be/other"),
])
def test_identity_fields_are_frozen(make_job, field, value):
    job = make_job()
    before = getattr(job, field)
    with pytest.raises(PydanticValidationError):
        setattr(job, field, value)
    assert getattr(job, field) == before


def test_status_values():
    assert [s.value for s in JobStatus] == ["queued", "running", "done", "error"]
    assert JobStatus.DONE.is_terminal and JobStatus.ERROR.is_terminal
    assert not JobStatus.QUEUED.is_terminal and not JobStatus.RUNNING.is_terminal


def test_snapshot_has_every_field_but_the_log(make_job):
    job = make_job(folder="Rock", source_url="https://www.youtube.com/watch?v=x1")
    job.log.append("out", "hello")

    snapshot = JobSnapshot.of(job)
    data = snapshot.model_dump()
    assert "log" not in data
    assert data["id"] == job.id
    assert data["folder"] == "Rock"
    assert data["source_url"] == "https://www.youtube.com/watch?v=x1"
    assert data["status"] == JobStatus.QUEUED


def test_snapshot_does_not_follow_later_changes(make_job):
    job = make_job()
    snapshot = JobSnapshot.of(job)
    job.mark_running()
    assert snapshot.status == JobStatus.QUEUED
