"""
Host lifecycle events.

Handlers run on the publishing thread. A handler that raises is logged and
stays subscribed; the remaining handlers still run.
"""

import threading
from typing import Any, Callable, Dict, List

from kwollect_input.utils.logger import logger

EventHandler = Callable[..., Any]

# Published by the host at the end of every measurement cycle
MEASUREMENT_CYCLE_FINISHED = "measurement_cycle_finished"


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: EventHandler) -> None:
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        with self._lock:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def subscribers(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, []))

    def publish(self, event: str, **payload: Any) -> int:
        """Deliver event to every subscriber. Returns the number of handlers run."""
        with self._lock:
            handlers = list(self._handlers.get(event, []))

        if not handlers:
            logger.debug(f"No subscriber for event {event}")

        for handler in handlers:
            try:
                handler(**payload)
            except Exception as e:
                logger.exception(f"Handler {handler!r} failed on event {event}: {e}")
        return len(handlers)
