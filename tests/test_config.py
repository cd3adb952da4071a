"""Tests for environment-driven settings."""
from pathlib import Path

import pytest

from youload.config import DEFAULT_BACKEND_URL, MAX_BATCH_SIZE, Settings, resolve_ffprobe_path


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "YOULOAD_BACKEND_URL",
        "YOULOAD_SESSION_FILE",
        "YOULOAD_PROBE_TIMEOUT",
        "YOULOAD_REQUEST_TIMEOUT",
        "FFPROBE_BINARY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.backend_url == DEFAULT_BACKEND_URL
    assert settings.session_file == Path("~/.youload/session.json").expanduser()
    assert settings.max_batch_size == MAX_BATCH_SIZE == 10
    assert settings.probe_timeout == 30.0


def test_overrides(clean_env, tmp_path):
    clean_env.setenv("YOULOAD_BACKEND_URL", "https://api.example.com/")
    clean_env.setenv("YOULOAD_SESSION_FILE", str(tmp_path / "s.json"))
    clean_env.setenv("YOULOAD_REQUEST_TIMEOUT", "90")

    settings = Settings.from_env()

    assert settings.backend_url == "https://api.example.com"
    assert settings.session_file == tmp_path / "s.json"
    assert settings.request_timeout == 90.0


def test_invalid_timeout(clean_env):
    clean_env.setenv("YOULOAD_PROBE_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="YOULOAD_PROBE_TIMEOUT"):
        Settings.from_env()


def test_ffprobe_from_env(clean_env, tmp_path):
    binary = tmp_path / "ffprobe"
    binary.write_text("")
    clean_env.setenv("FFPROBE_BINARY", str(binary))
    assert resolve_ffprobe_path() == str(binary)
