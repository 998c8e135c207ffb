"""
Bounded blocking FIFO of formatted chat lines.

Producers block while the queue is full and consumers block while it is
empty. A full queue stalls broadcasters on purpose: a slow persistence path
throttles the server instead of dropping lines or growing without bound.
"""

import threading
from collections import deque
from typing import List, Optional

from common.constants import DEFAULT_QUEUE_CAPACITY
from server.chat.errors import QueueClosedError


class DeliveryQueue:
    """FIFO with blocking push/pop and a close() that releases every waiter."""

    def __init__(self, capacity: int = DEFAULT_QUEUE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._items = deque()
        self._closed = False

        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def is_empty(self) -> bool:
        return len(self) == 0

    def push(self, line: str):
        """Append ``line``, waiting for room. Raises QueueClosedError after close()."""
        with self._not_full:
            while len(self._items) >= self.capacity and not self._closed:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError("delivery queue is closed")
            self._items.append(line)
            self._not_empty.notify()

    def pop(self) -> str:
        """
        Remove and return the oldest line, waiting for one to arrive.

        A closed queue still hands out what it holds; QueueClosedError is
        raised only once it is both closed and empty.
        """
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                raise QueueClosedError("delivery queue is closed")
            line = self._items.popleft()
            self._not_full.notify()
            return line

    def try_peek(self) -> Optional[str]:
        with self._lock:
            return self._items[0] if self._items else None

    def drain(self) -> List[str]:
        """Empty the queue and return everything it held, oldest first."""
        with self._lock:
            lines = list(self._items)
            self._items.clear()
            self._not_full.notify_all()
            return lines

    def close(self):
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()
