"""
Session identifier generation.

Every accepted connection gets a number: 1 for the first, 2 for the second,
and so on. The accept loop and the session threads never share anything
else about identifiers, so the whole component is a counter and a lock.

    Thread A: next() ─┐
                      ├──► lock ──► counter += 1 ──► return counter
    Thread B: next() ─┘

Increment and read happen inside the same critical section, so two callers
can never observe the same value.
"""

import threading


class SessionIdGenerator:
    """
    Thread-safe, strictly increasing session identifiers starting at 1.

    Usage:
        ids = SessionIdGenerator()
        ids.next()  # 1
        ids.next()  # 2
    """

    def __init__(self):
        self._counter = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        """Issue the next identifier."""
        with self._lock:
            self._counter += 1
            return self._counter

    @property
    def current(self) -> int:
        """Last identifier issued (0 if none yet)."""
        with self._lock:
            return self._counter
