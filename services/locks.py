"""
Per-key critical sections.

Order and wallet operations read a distributor's balance (and an order's
status) and then write based on what they read. Holding the distributor's
lock across the read and the write prevents two deliveries or edits from
spending the same balance. Different distributors never block each other.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield


__all__ = ["KeyedLocks"]
