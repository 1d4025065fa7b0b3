"""Cooperative cancellation for long-running scans."""

import threading


class CancellationToken:
    """Thread-safe flag checked periodically by long-running work.

    Cancelling never interrupts a call in flight; workers observe the
    flag at their next check and stop on their own.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()
