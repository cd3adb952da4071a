"""Error taxonomy for youload."""
from typing import Iterable, List, Optional


class YouloadError(Exception):
    """Base class for all youload errors."""


class ValidationError(YouloadError):
    """Raised when a batch cannot start because items are missing required metadata."""

    def __init__(self, items: Iterable):
        self.items = list(items)
        names = ", ".join(item.filename for item in self.items)
        super().__init__(f"Please add titles to all videos before uploading: {names}")

    @property
    def item_ids(self) -> List[str]:
        return [item.id for item in self.items]


class SubmissionError(YouloadError):
    """Raised when the remote service rejects an upload or the transfer fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ProbeError(YouloadError):
    """Raised when a file's duration/orientation cannot be read."""


class NotAuthenticatedError(YouloadError):
    """Raised when an operation needs a credential and none is available."""
