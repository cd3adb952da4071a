"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces so the orchestrator can be driven by fakes in
tests and by the real httpx/ffprobe services in the CLI.
"""
from pathlib import Path
from typing import Callable, Optional, Protocol, runtime_checkable

from .models import ProbeResult, SubmissionResult, UploadItem

ProgressCallback = Callable[[float], None]


@runtime_checkable
class IMediaProber(Protocol):
    """Interface for reading duration and orientation of a media file."""

    async def probe(self, path: Path) -> ProbeResult:
        """Read intrinsic properties without decoding the whole file."""
        ...


@runtime_checkable
class ISubmissionClient(Protocol):
    """Interface for transferring one item to the publishing service."""

    async def submit(
        self,
        item: UploadItem,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SubmissionResult:
        """Upload the item's file and metadata; raise SubmissionError on failure."""
        ...


@runtime_checkable
class ISessionGuard(Protocol):
    """Interface for the authenticated session."""

    def is_authenticated(self) -> bool:
        ...

    def current_credential(self) -> Optional[str]:
        ...

    def sign_out(self) -> None:
        ...
