"""
Cancellation - Deadline and manual cancel for long catalog scans
"""

import threading
import time
from typing import Optional


class CancellationToken:
    """
    Stops a long running metadata call early.

    The token fires when cancel() was called (from any thread) or when the
    optional timeout has elapsed. Calls that accept a token return the rows
    collected so far once it fires.

    Usage:
        token = CancellationToken(timeout=5.0)
        tables = facade.get_tables(None, None, "%", None, cancel=token)
        if token.cancelled:
            print("Table list is incomplete")
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())
