"""
Configuration for youload.

Settings are read from the environment (optionally primed from a .env file
by the CLI) into an immutable dataclass.
"""
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BACKEND_URL = "http://localhost:8787"
DEFAULT_SESSION_FILE = Path("~/.youload/session.json")
MAX_BATCH_SIZE = 10


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def resolve_ffprobe_path() -> str:
    """Locate ffprobe: FFPROBE_BINARY first, then the system PATH."""
    env_ffprobe = os.getenv("FFPROBE_BINARY")
    if env_ffprobe and os.path.exists(env_ffprobe):
        return env_ffprobe
    return shutil.which("ffprobe") or "ffprobe"


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration."""
    backend_url: str = DEFAULT_BACKEND_URL
    session_file: Path = DEFAULT_SESSION_FILE
    ffprobe_path: str = "ffprobe"
    probe_timeout: float = 30.0
    request_timeout: float = 600.0
    max_batch_size: int = MAX_BATCH_SIZE

    @classmethod
    def from_env(cls) -> "Settings":
        backend_url = os.getenv("YOULOAD_BACKEND_URL") or DEFAULT_BACKEND_URL
        session_file = os.getenv("YOULOAD_SESSION_FILE")
        return cls(
            backend_url=backend_url.rstrip("/"),
            session_file=Path(session_file or DEFAULT_SESSION_FILE).expanduser(),
            ffprobe_path=resolve_ffprobe_path(),
            probe_timeout=_env_float("YOULOAD_PROBE_TIMEOUT", 30.0),
            request_timeout=_env_float("YOULOAD_REQUEST_TIMEOUT", 600.0),
        )
