"""Event emitter implementation using Observer Pattern."""
import threading
from typing import Dict, List, Callable, Optional

from ..logging import get_logger

logger = get_logger('s3stream.events')


class EventEmitter:
    """
    Event emitter using Observer Pattern.

    Upload events are emitted from worker threads, so handler
    registration is guarded by a lock and handlers must be thread-safe.
    A raising handler is logged and does not affect the upload.
    """

    def __init__(self):
        """Initializes event emitter."""
        self._events: Dict[str, List[Callable]] = {}
        self._lock = threading.Lock()

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers an event handler."""
        with self._lock:
            self._events.setdefault(event, []).append(callback)
        return self

    def emit(self, event: str, *args, **kwargs):
        """Emits an event."""
        with self._lock:
            callbacks = list(self._events.get(event, ()))
        for callback in callbacks:
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Handler for '{event}' raised: {e}")

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Removes an event handler."""
        with self._lock:
            if event not in self._events:
                return self

            if callback is None:
                del self._events[event]
            else:
                self._events[event] = [cb for cb in self._events[event] if cb != callback]

        return self

    def listener_count(self, event: str) -> int:
        """Returns number of handlers registered for an event."""
        with self._lock:
            return len(self._events.get(event, ()))
