"""FIFO command queue shared by producer threads and the render executor."""

from __future__ import annotations

from collections import deque
import threading
from typing import Deque, Generic, TypeVar

T = TypeVar("T")


class CommandQueue(Generic[T]):
    """Unbounded FIFO with drain tracking.

    One lock guards two conditions: ``has_work`` wakes the single consumer,
    ``idle`` wakes threads waiting for the queue to empty with nothing in
    flight. Once closed, ``put`` refuses new items.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._has_work = threading.Condition(self._lock)
        self._idle = threading.Condition(self._lock)
        self._items: Deque[T] = deque()
        self._in_flight = False
        self._closed = False

    # --- Producer side ------------------------------------------------------------
    def put(self, item: T) -> bool:
        """Append ``item``; returns False (item dropped) once closed."""

        with self._lock:
            if self._closed:
                return False
            self._items.append(item)
            self._has_work.notify()
            return True

    def wait_idle(self) -> None:
        """Block until the queue is empty and no item is in flight."""

        with self._idle:
            while self._items or self._in_flight:
                self._idle.wait()

    # --- Consumer side ------------------------------------------------------------
    def take(self) -> T:
        """Pop the front item, waiting for one; marks it in flight."""

        with self._has_work:
            while not self._items:
                self._has_work.wait()
            self._in_flight = True
            return self._items.popleft()

    def task_done(self) -> None:
        """Mark the in-flight item finished and wake idle waiters if empty."""

        with self._lock:
            self._in_flight = False
            if not self._items:
                self._idle.notify_all()

    def close(self) -> int:
        """Refuse further items and discard queued ones; returns the count dropped."""

        with self._lock:
            self._closed = True
            dropped = len(self._items)
            self._items.clear()
            return dropped

    # --- Introspection ------------------------------------------------------------
    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def qsize(self) -> int:
        with self._lock:
            return len(self._items)

    def busy(self) -> bool:
        with self._lock:
            return bool(self._items) or self._in_flight


__all__ = ["CommandQueue"]
