"""Test configuration and fixtures."""

import sys
from typing import List

import pytest

from app.jobs.log_buffer import LogBuffer
from app.jobs.models import JobRecord
from app.storage.music_library import MusicLibrary


MISSING_EXECUTABLE = "/nonexistent/bin/definitely-not-a-worker"


@pytest.fixture
def python_command():
    """Build an argv that runs a snippet in a fresh interpreter."""
    def _command(code: str) -> List[str]:
        return [sys.executable, "-c", code]
    return _command


@pytest.fixture
def missing_command() -> List[str]:
    return [MISSING_EXECUTABLE, "--version"]


@pytest.fixture
def music_root(tmp_path):
    root = tmp_path / "music"
    root.mkdir()
    return root


@pytest.fixture
def library(music_root) -> MusicLibrary:
    return MusicLibrary(str(music_root))


@pytest.fixture
def make_job():
    def _make(folder: str = "Jazz", source_url: str = "https://youtu.be/abc123", max_lines: int = 2000) -> JobRecord:
        return JobRecord(folder=folder, source_url=source_url, log=LogBuffer(max_lines=max_lines))
    return _make
