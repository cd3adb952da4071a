"""
Item Store - ordered, capped, in-memory collection of upload items.

Pure state container: no I/O besides reading file sizes at ingestion and
no blocking. Three actors write to it (user edits, probe callbacks and the
orchestrator), always as merges keyed by item id.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import fields, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .classifier import is_short_form
from .config import MAX_BATCH_SIZE
from .models import EDITABLE_FIELDS, BatchProgress, ItemStatus, ProbeResult, UploadItem, Visibility

logger = logging.getLogger(__name__)

_ITEM_FIELDS = frozenset(f.name for f in fields(UploadItem)) - {"id", "file_path"}

_TRANSITIONS = {
    ItemStatus.PENDING: {ItemStatus.UPLOADING},
    ItemStatus.UPLOADING: {ItemStatus.COMPLETED, ItemStatus.ERROR},
}


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class ItemStore:
    """
    Ordered collection of UploadItem records, at most `capacity` long.

    Usage:
        store = ItemStore()
        items = store.add([Path("a.mp4"), Path("b.mov")])
        store.edit(items[0].id, title="My video", visibility="unlisted")
        store.remove(items[1].id)
    """

    def __init__(self, capacity: int = MAX_BATCH_SIZE):
        self._capacity = capacity
        self._items: Dict[str, UploadItem] = {}
        self._locked = False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[UploadItem]:
        return iter(list(self._items.values()))

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        return max(self._capacity - len(self._items), 0)

    @property
    def is_full(self) -> bool:
        return self.remaining == 0

    @property
    def is_locked(self) -> bool:
        return self._locked

    def all(self) -> List[UploadItem]:
        """Items in insertion order."""
        return list(self._items.values())

    def get(self, item_id: str) -> Optional[UploadItem]:
        return self._items.get(item_id)

    def add(self, paths: Iterable[Union[str, Path]]) -> List[UploadItem]:
        """
        Create pending items from the head of `paths`.

        Files beyond the remaining capacity are dropped, not queued.

        Returns:
            The newly created items
        """
        if self._locked:
            logger.debug("Store is locked by a running batch, ignoring add")
            return []

        paths = list(paths)
        accepted = paths[:self.remaining]
        dropped = len(paths) - len(accepted)
        if dropped:
            logger.debug("Batch is limited to %d items, dropped %d file(s)", self._capacity, dropped)

        created = []
        for raw in accepted:
            path = Path(raw)
            item_id = _new_id()
            while item_id in self._items:
                item_id = _new_id()
            try:
                size = path.stat().st_size
            except OSError:
                size = 0
            item = UploadItem(id=item_id, file_path=path, title=path.stem, size_bytes=size)
            self._items[item_id] = item
            created.append(item)
        return created

    def update(self, item_id: str, **changes) -> Optional[UploadItem]:
        """
        Merge fields into an item.

        No-op (returns None) if the id is unknown. Unknown field names are a
        programming error and raise TypeError. Status only moves forward
        (pending -> uploading -> completed | error); any other status change
        raises ValueError. A lower progress value for an uploading item is
        ignored.
        """
        unknown = set(changes) - _ITEM_FIELDS
        if unknown:
            raise TypeError(f"Unknown UploadItem field(s): {', '.join(sorted(unknown))}")

        item = self._items.get(item_id)
        if item is None:
            return None

        status = changes.get("status", item.status)
        if status != item.status and status not in _TRANSITIONS.get(item.status, ()):
            raise ValueError(
                f"Invalid status change for {item.filename}: "
                f"{item.status.value} -> {ItemStatus(status).value}"
            )
        if (
            item.status == ItemStatus.UPLOADING
            and status == ItemStatus.UPLOADING
            and changes.get("progress_percent", item.progress_percent) < item.progress_percent
        ):
            changes.pop("progress_percent")

        updated = replace(item, **changes)
        self._items[item_id] = updated
        return updated

    def edit(self, item_id: str, **changes) -> bool:
        """
        Apply a user edit to a pending item.

        Only metadata fields can be edited. `visibility` accepts a Visibility
        or its string value. `is_short_form` can only be switched on for items
        whose probed properties qualify as short-form.

        Returns:
            True if the edit was applied, False if the item is unknown or no
            longer pending
        """
        not_editable = set(changes) - EDITABLE_FIELDS
        if not_editable:
            raise ValueError(f"Field(s) not editable: {', '.join(sorted(not_editable))}")

        item = self._items.get(item_id)
        if item is None or not item.is_pending:
            return False

        if "visibility" in changes:
            changes["visibility"] = Visibility(changes["visibility"])

        if "is_short_form" in changes:
            wanted = bool(changes["is_short_form"])
            if wanted and not is_short_form(item.duration_seconds, item.is_vertical):
                raise ValueError(f"{item.filename} is not vertical and at most 60 seconds long")
            changes["is_short_form"] = wanted
            changes["short_form_overridden"] = True

        self.update(item_id, **changes)
        return True

    def apply_probe(self, item_id: str, result: ProbeResult) -> Optional[UploadItem]:
        """
        Write probing results back to an item.

        Duration and orientation are always recorded. The short-form flag is
        left alone once the user has set it explicitly.
        """
        item = self._items.get(item_id)
        if item is None:
            return None

        changes = {
            "duration_seconds": result.duration_seconds,
            "is_vertical": result.is_vertical,
        }
        if not item.short_form_overridden:
            changes["is_short_form"] = is_short_form(result.duration_seconds, result.is_vertical)
        return self.update(item_id, **changes)

    def remove(self, item_id: str) -> bool:
        """Delete a pending item. Items that started uploading stay."""
        item = self._items.get(item_id)
        if item is None:
            return False
        if self._locked or not item.is_pending:
            logger.debug("Refusing to remove %s (status=%s)", item.filename, item.status.value)
            return False
        del self._items[item_id]
        return True

    def clear(self) -> None:
        """Discard the whole batch."""
        if self._locked:
            raise RuntimeError("Cannot clear the store while a batch is running")
        self._items.clear()

    def missing_titles(self) -> List[UploadItem]:
        return [item for item in self._items.values() if not item.has_title]

    def pending(self) -> List[UploadItem]:
        return [item for item in self._items.values() if item.is_pending]

    def progress(self) -> BatchProgress:
        """Aggregate progress, recomputed from the current items."""
        items = list(self._items.values())
        short_form = sum(1 for item in items if item.is_short_form)
        return BatchProgress(
            total_items=len(items),
            completed_items=sum(1 for item in items if item.is_terminal),
            uploading_items=sum(1 for item in items if item.status == ItemStatus.UPLOADING),
            short_form_count=short_form,
            regular_count=len(items) - short_form,
            total_size_bytes=sum(item.size_bytes for item in items),
        )

    @contextmanager
    def locked(self):
        """Freeze membership (no add/remove) for the duration of a run."""
        if self._locked:
            raise RuntimeError("Store is already locked")
        self._locked = True
        try:
            yield self
        finally:
            self._locked = False
