"""Shared fixtures for youload tests."""
from typing import Dict, List, Optional

import pytest

from youload.exceptions import SubmissionError
from youload.models import SubmissionResult, UploadItem
from youload.store import ItemStore


class FakeSession:
    """Session guard double with a fixed credential."""

    def __init__(self, token: Optional[str] = "token-123"):
        self.token = token

    def is_authenticated(self) -> bool:
        return self.token is not None

    def current_credential(self) -> Optional[str]:
        return self.token

    def sign_out(self) -> None:
        self.token = None


class FakeSubmissionClient:
    """
    Submission client double.

    Items whose title is listed in `failures` fail with SubmissionError;
    every call reports the percentages in `steps`.
    """

    def __init__(self, failures: Optional[Dict[str, str]] = None, steps=(25, 50, 75)):
        self.failures = failures or {}
        self.steps = steps
        self.calls: List[UploadItem] = []
        self.active = 0
        self.max_active = 0

    async def submit(self, item, progress_callback=None):
        self.calls.append(item)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            for step in self.steps:
                if progress_callback:
                    progress_callback(step)
            if item.title in self.failures:
                raise SubmissionError(self.failures[item.title], status_code=500)
            return SubmissionResult(remote_id=f"vid-{item.title}", remote_title=item.title)
        finally:
            self.active -= 1


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client():
    return FakeSubmissionClient()


@pytest.fixture
def video_files(tmp_path):
    """Three small fake video files."""
    paths = []
    for name in ("A.mp4", "B.mov", "C.webm"):
        path = tmp_path / name
        path.write_bytes(b"\x00" * 64)
        paths.append(path)
    return paths


@pytest.fixture
def store():
    return ItemStore()


@pytest.fixture
def make_client():
    """Factory for FakeSubmissionClient with custom failures."""
    return FakeSubmissionClient


@pytest.fixture
def make_session():
    return FakeSession
