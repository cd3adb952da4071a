"""Event emitter used as the observable boundary towards the presentation layer."""
from typing import Callable, Dict, List, Set
import asyncio
import inspect
import logging
logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Simple event emitter for upload events.

    Listeners may be plain functions or coroutine functions. A failing
    listener is logged and never interrupts the emitter.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}
        self._pending: Set[asyncio.Task] = set()

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        if event_name not in self._listeners:
            self._listeners[event_name] = []
        if callback not in self._listeners[event_name]:
            self._listeners[event_name].append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if event_name in self._listeners:
            if callback in self._listeners[event_name]:
                self._listeners[event_name].remove(callback)

    def listeners(self, event_name: str) -> List[Callable]:
        return list(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs):
        """Emit an event to all listeners, awaiting coroutine listeners."""
        for callback in self.listeners(event_name):
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(*args, **kwargs)
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")

    def emit_nowait(self, event_name: str, *args, **kwargs):
        """
        Emit from synchronous code.

        Plain listeners run inline; coroutine listeners are scheduled on the
        running loop and awaited by `drain()`.
        """
        for callback in self.listeners(event_name):
            try:
                if inspect.iscoroutinefunction(callback):
                    task = asyncio.get_running_loop().create_task(callback(*args, **kwargs))
                    self._pending.add(task)
                    task.add_done_callback(self._on_task_done)
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")

    async def drain(self):
        """Wait for listeners scheduled by `emit_nowait`."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error in async event listener: {task.exception()}")
