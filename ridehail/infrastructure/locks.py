"""
In-process locking primitives.

All state lives in memory for the lifetime of the process, so a
``threading`` mutex is enough to serialise id generation and record
mutations across concurrent request handlers.
"""

from __future__ import annotations

import threading


class IdSequence:
    """Monotonic integer id generator guarded by a mutex."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value
