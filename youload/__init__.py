"""
youload - batch video uploads to a publishing service.

Services are injected into the orchestrator:
- ItemStore: ordered, capped (10) set of upload items
- MediaProber: reads duration/orientation with ffprobe, classifies short-form
- HTTPSubmissionClient: multipart upload with bearer credential
- SessionGuard: persisted credential and identity

Usage:
    from youload import (
        BatchOrchestrator, HTTPSubmissionClient, ItemStore, MediaProber,
        SessionGuard, CredentialStore, Settings,
    )

    settings = Settings.from_env()
    session = SessionGuard(CredentialStore(settings.session_file))
    store = ItemStore(settings.max_batch_size)
    prober = MediaProber(settings.ffprobe_path, settings.probe_timeout)

    for item in store.add(paths):
        prober.schedule(store, item)
    await prober.wait()

    async with HTTPSubmissionClient(settings.backend_url, session) as client:
        summary = await BatchOrchestrator(store, session, client).run()
"""
from .classifier import is_short_form
from .config import Settings
from .exceptions import (
    NotAuthenticatedError,
    ProbeError,
    SubmissionError,
    ValidationError,
    YouloadError,
)
from .models import (
    BatchProgress,
    BatchSummary,
    ItemResult,
    ItemStatus,
    ProbeResult,
    SubmissionResult,
    UploadItem,
    Visibility,
)
from .orchestrator import BatchOrchestrator, FileCollector
from .services import HTTPSubmissionClient, MediaProber
from .session import CredentialStore, SessionGuard
from .store import ItemStore

__version__ = "0.1.0"
__all__ = [
    # Main
    "BatchOrchestrator",
    "ItemStore",
    "SessionGuard",
    "CredentialStore",
    "Settings",
    "FileCollector",
    "is_short_form",
    # Models
    "UploadItem",
    "ItemStatus",
    "Visibility",
    "ProbeResult",
    "SubmissionResult",
    "BatchProgress",
    "BatchSummary",
    "ItemResult",
    # Services
    "HTTPSubmissionClient",
    "MediaProber",
    # Errors
    "YouloadError",
    "ValidationError",
    "SubmissionError",
    "ProbeError",
    "NotAuthenticatedError",
]
