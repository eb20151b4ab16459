"""
Single-slot mailbox between the event handler (writer) and the poll call
(reader). The lock is private and only held for the swap itself.
"""

import threading
from typing import Generic, Optional, TypeVar

from kwollect_input.utils.logger import logger

T = TypeVar("T")


class SharedSlot(Generic[T]):
    """Holds at most one pending item. Last write wins."""

    def __init__(self) -> None:
        self._item: Optional[T] = None
        self._lock = threading.Lock()

    def offer(self, item: T) -> Optional[T]:
        """Store item, returning the pending item it displaced (if any)."""
        with self._lock:
            displaced, self._item = self._item, item
        return displaced

    def take(self) -> Optional[T]:
        """Read and clear the slot without blocking.

        Returns None when the slot is empty, or when another thread holds the
        lock; the pending item then stays for the next take().
        """
        if not self._lock.acquire(blocking=False):
            logger.debug("Slot busy, skipping this take")
            return None
        try:
            item, self._item = self._item, None
        finally:
            self._lock.release()
        return item

    def pending(self) -> bool:
        with self._lock:
            return self._item is not None
