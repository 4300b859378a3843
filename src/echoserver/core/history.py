"""
=============================================================================
SHARED HISTORY LEDGER
=============================================================================

The server remembers the last few records it echoed, across ALL sessions.
Every session thread writes into the same ledger, so it is the one piece of
state (besides the identifier counter) that really is shared.

=============================================================================
BOUNDED, ORDERED, THREAD-SAFE
=============================================================================

    append("[session#1 ...] a")
    append("[session#2 ...] b")        capacity = 3
    append("[session#1 ...] c")
    append("[session#2 ...] d")

    ┌──────┬──────┬──────┐
    │  b   │  c   │  d   │   ◄── "a" was evicted (oldest first)
    └──────┴──────┴──────┘
    oldest           newest

Order is the order in which appends reach the ledger, NOT session order.
Two sessions racing each other interleave in whatever order the lock hands
out, but no append is ever lost and the length never exceeds capacity.

The lock guards only the append/evict (or the copy for snapshot()). No I/O
happens while it is held, so one slow client cannot stall other sessions.

=============================================================================
"""

import threading
from collections import deque
from typing import List


MAX_HISTORY = 10


class HistoryLedger:
    """
    Bounded, insertion-ordered record buffer shared by all sessions.

    Attributes:
        capacity: Maximum number of records retained.
    """

    def __init__(self, capacity: int = MAX_HISTORY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")

        self._capacity = capacity
        self._records: deque = deque()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, record: str) -> None:
        """
        Add a record at the newest end, evicting the oldest if over capacity.

        Args:
            record: Formatted record string.
        """
        with self._lock:
            self._records.append(record)
            if len(self._records) > self._capacity:
                self._records.popleft()

    def snapshot(self) -> List[str]:
        """
        Return a consistent copy of the ledger, oldest first.

        The copy is taken under the lock, so it never shows a half-applied
        append.
        """
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        return f"HistoryLedger(capacity={self._capacity}, size={len(self)})"
