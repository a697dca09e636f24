"""Cooperative cancellation shared by search, indexing, and replace."""

import threading


class CancellationToken:
    """A flag that long-running operations poll between files.

    Work that has started on a file always finishes; cancellation only
    prevents the next file from starting.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses."""
        return self._event.wait(timeout)
