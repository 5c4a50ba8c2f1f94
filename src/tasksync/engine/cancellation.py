"""Cooperative cancellation for sync runs."""

from __future__ import annotations

import threading


class CancellationToken:
    """Flag checked by the orchestrator between items and listing pages.

    The reconciler also checks it before each remote write.

    Thread-safe, so a CLI signal handler or an API request thread can cancel a
    run that is executing elsewhere. Cancelling never interrupts an item that
    has already started its remote write.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
