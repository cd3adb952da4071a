"""
Models for youload.

Immutable dataclasses: the item store swaps in a new UploadItem on every
merge, so snapshots handed to listeners never change underneath them.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class ItemStatus(Enum):
    """Upload item lifecycle state."""
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETED, ItemStatus.ERROR)


class Visibility(Enum):
    """Visibility of the published video."""
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


# Fields the user may change while an item is still pending.
EDITABLE_FIELDS = frozenset({"title", "description", "tags_raw", "visibility", "is_short_form"})

WATCH_URL = "https://youtube.com/watch?v={video_id}"
THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def build_watch_url(video_id: Optional[str]) -> Optional[str]:
    """Shareable link for a published video id."""
    return WATCH_URL.format(video_id=video_id) if video_id else None


def build_thumbnail_url(video_id: Optional[str]) -> Optional[str]:
    return THUMBNAIL_URL.format(video_id=video_id) if video_id else None


@dataclass(frozen=True)
class UploadItem:
    """One candidate file and its publishing intent."""
    id: str
    file_path: Path
    title: str
    size_bytes: int = 0
    description: str = ""
    tags_raw: str = ""
    visibility: Visibility = Visibility.PUBLIC
    is_short_form: bool = False
    short_form_overridden: bool = False
    duration_seconds: float = 0.0
    is_vertical: bool = False
    status: ItemStatus = ItemStatus.PENDING
    progress_percent: float = 0.0
    error: Optional[str] = None
    remote_id: Optional[str] = None
    remote_title: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.file_path.name

    @property
    def tags(self) -> List[str]:
        """Tags parsed from the comma separated raw input."""
        return [tag.strip() for tag in self.tags_raw.split(",") if tag.strip()]

    @property
    def has_title(self) -> bool:
        return bool(self.title.strip())

    @property
    def is_pending(self) -> bool:
        return self.status == ItemStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class ProbeResult:
    """Intrinsic properties read from a media container."""
    duration_seconds: float
    width: int
    height: int

    @property
    def is_vertical(self) -> bool:
        return self.height > self.width


@dataclass(frozen=True)
class SubmissionResult:
    """What the remote service returns for an accepted upload."""
    remote_id: str
    remote_title: str

    @property
    def watch_url(self) -> str:
        return build_watch_url(self.remote_id)

    @property
    def thumbnail_url(self) -> str:
        return build_thumbnail_url(self.remote_id)


@dataclass(frozen=True)
class BatchProgress:
    """Aggregate view of the whole item store, including items finished by earlier runs."""
    total_items: int = 0
    completed_items: int = 0
    uploading_items: int = 0
    short_form_count: int = 0
    regular_count: int = 0
    total_size_bytes: int = 0

    @property
    def overall_percent(self) -> float:
        if self.total_items == 0:
            return 0.0
        return 100 * self.completed_items / self.total_items


@dataclass(frozen=True)
class ItemResult:
    """Outcome of one processed item."""
    item_id: str
    filename: str
    status: ItemStatus
    remote_id: Optional[str] = None
    remote_title: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ItemStatus.COMPLETED

    @property
    def watch_url(self) -> Optional[str]:
        return build_watch_url(self.remote_id)

    @classmethod
    def from_item(cls, item: UploadItem) -> "ItemResult":
        return cls(
            item_id=item.id,
            filename=item.filename,
            status=item.status,
            remote_id=item.remote_id,
            remote_title=item.remote_title,
            error=item.error,
        )


@dataclass(frozen=True)
class BatchSummary:
    """
    Terminal tally of one orchestration run.

    Counts only the items that run submitted. Items finished by an earlier
    run on the same store are excluded here but still count towards
    BatchProgress, which always covers the whole store.
    """
    succeeded_count: int
    total_count: int
    results: List[ItemResult] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return self.total_count - self.succeeded_count

    @property
    def all_success(self) -> bool:
        return self.failed_count == 0
