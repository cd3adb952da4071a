"""
Batch Orchestrator - drives sequential submission of the item store.

Per-item state machine:

    pending --(reached in order)--> uploading
    uploading --(submission succeeds)--> completed
    uploading --(submission fails)--> error

Submissions are awaited one at a time in insertion order. A failing item is
marked `error` and the batch moves on; nothing is retried.
"""
import logging
from typing import Callable, List, Optional

from ..exceptions import ValidationError
from ..models import BatchProgress, BatchSummary, ItemResult, ItemStatus, UploadItem
from ..protocols import ISessionGuard, ISubmissionClient
from ..store import ItemStore
from ..utils.events import EventEmitter
from .models import RunState

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """
    Orchestrates a batch upload using injected collaborators.

    Usage:
        orchestrator = BatchOrchestrator(store, session, client)
        orchestrator.on_item_progress(lambda item: print(item.progress_percent))
        orchestrator.on_progress(lambda progress: print(progress.overall_percent))
        summary = await orchestrator.run()
        if summary:
            print(f"{summary.succeeded_count}/{summary.total_count} uploaded")
    """

    def __init__(
        self,
        store: ItemStore,
        session: ISessionGuard,
        client: ISubmissionClient,
    ):
        self._store = store
        self._session = session
        self._client = client
        self._events = EventEmitter()
        self._state = RunState.IDLE
        self._summary: Optional[BatchSummary] = None

    # Event subscription methods
    def on_start(self, callback: Callable[[BatchProgress], None]):
        """Called when a run starts. Receives the initial BatchProgress."""
        self._events.on("start", callback)

    def on_item_start(self, callback: Callable[[UploadItem], None]):
        """Called when an item starts uploading."""
        self._events.on("item_start", callback)

    def on_item_progress(self, callback: Callable[[UploadItem], None]):
        """Called on every progress increase of the uploading item."""
        self._events.on("item_progress", callback)

    def on_item_complete(self, callback: Callable[[UploadItem], None]):
        """Called when an item is accepted by the remote service."""
        self._events.on("item_complete", callback)

    def on_item_fail(self, callback: Callable[[UploadItem], None]):
        """Called when an item fails. The item carries the error message."""
        self._events.on("item_fail", callback)

    def on_progress(self, callback: Callable[[BatchProgress], None]):
        """Called with aggregate progress after every item resolves."""
        self._events.on("progress", callback)

    def on_finish(self, callback: Callable[[BatchSummary], None]):
        """Called once with the final tally."""
        self._events.on("finish", callback)

    # State properties
    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == RunState.RUNNING

    @property
    def summary(self) -> Optional[BatchSummary]:
        """Tally of the last completed run."""
        return self._summary

    def progress(self) -> BatchProgress:
        return self._store.progress()

    def can_start(self) -> bool:
        """Whether the submit action should be enabled."""
        return (
            not self.is_running
            and self._session.is_authenticated()
            and bool(self._store.pending())
            and all(item.has_title for item in self._store.pending())
        )

    async def run(self) -> Optional[BatchSummary]:
        """
        Submit every pending item, one at a time, in insertion order.

        Returns:
            BatchSummary, or None when there is nothing to do (empty batch,
            nothing pending or no authenticated session)

        Raises:
            ValidationError: an item has an empty title (no request is made)
            RuntimeError: a run is already in progress
        """
        if self.is_running:
            raise RuntimeError("Batch upload already running")

        if not self._session.is_authenticated():
            logger.info("Not authenticated, skipping batch upload")
            return None

        queue = self._store.pending()
        if not queue:
            logger.info("No pending items to upload")
            return None

        missing = [item for item in queue if not item.has_title]
        if missing:
            raise ValidationError(missing)

        self._state = RunState.RUNNING
        results: List[ItemResult] = []
        try:
            with self._store.locked():
                await self._events.emit("start", self._store.progress())
                logger.info("Uploading %d video(s)", len(queue))

                for item in queue:
                    resolved = await self._process(item)
                    results.append(ItemResult.from_item(resolved))
                    await self._events.emit("progress", self._store.progress())
        finally:
            await self._events.drain()
            self._state = RunState.COMPLETED

        succeeded = sum(1 for result in results if result.success)
        self._summary = BatchSummary(
            succeeded_count=succeeded,
            total_count=len(results),
            results=results,
        )
        logger.info("Upload completed! %d/%d videos uploaded successfully.", succeeded, len(results))
        await self._events.emit("finish", self._summary)
        return self._summary

    async def _process(self, item: UploadItem) -> UploadItem:
        """Run one item through uploading to a terminal state."""
        item = self._store.update(item.id, status=ItemStatus.UPLOADING, progress_percent=0.0)
        await self._events.emit("item_start", item)

        def on_progress(percent: float) -> None:
            current = self._store.get(item.id)
            percent = max(0.0, min(float(percent), 100.0))
            if current is None or current.status != ItemStatus.UPLOADING:
                return
            if percent <= current.progress_percent:
                return
            updated = self._store.update(item.id, progress_percent=percent)
            self._events.emit_nowait("item_progress", updated)

        try:
            if not item.has_title:
                # title cleared by an edit after the run started
                raise ValidationError([item])
            result = await self._client.submit(item, on_progress)
        except Exception as exc:
            logger.error("Upload failed for %s: %s", item.title, exc)
            failed = self._store.update(item.id, status=ItemStatus.ERROR, error=str(exc) or type(exc).__name__)
            await self._events.emit("item_fail", failed)
            return failed

        completed = self._store.update(
            item.id,
            status=ItemStatus.COMPLETED,
            progress_percent=100.0,
            remote_id=result.remote_id,
            remote_title=result.remote_title,
        )
        await self._events.emit("item_complete", completed)
        return completed
