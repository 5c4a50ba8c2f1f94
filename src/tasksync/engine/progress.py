"""Progress reporting protocol for sync runs.

This is engine-level instrumentation, not an adapter contract. The
orchestrator emits run lifecycle events; consumers (the CLI's Rich progress
bar, a transport that forwards events to a UI) implement ``SyncProgress``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from tasksync.contracts.report import SyncDirection, SyncRunReport, TaskResult


class SyncProgress(ABC):
    """Observer interface for sync run events."""

    @abstractmethod
    def sync_started(self, remote: str, direction: SyncDirection) -> None:
        """A run for *remote* has acquired its slot and is about to enumerate items."""
        ...  # pragma: no cover

    @abstractmethod
    def sync_progress(self, processed: int, total: int, result: TaskResult) -> None:
        """*processed* of *total* items are done; *result* is the latest one."""
        ...  # pragma: no cover

    @abstractmethod
    def sync_completed(self, report: SyncRunReport) -> None:
        """The run finished (successfully or cancelled) with *report*."""
        ...  # pragma: no cover

    @abstractmethod
    def sync_failed(self, reason: str) -> None:
        """The run was aborted by a run-fatal error."""
        ...  # pragma: no cover


class NullSyncProgress(SyncProgress):
    """No-op implementation used when no progress display is requested."""

    def sync_started(self, remote: str, direction: SyncDirection) -> None:
        pass

    def sync_progress(self, processed: int, total: int, result: TaskResult) -> None:
        pass

    def sync_completed(self, report: SyncRunReport) -> None:
        pass

    def sync_failed(self, reason: str) -> None:
        pass


class EventSyncProgress(SyncProgress):
    """Forwards run events as ``{"kind": ..., "data": {...}}`` dicts to *emit*.

    Meant for a transport layer (SSE, websockets) that owns delivery.
    """

    def __init__(self, emit: Callable[[dict[str, Any]], None]) -> None:
        self._emit = emit
        self._remote: str | None = None
        self._direction: SyncDirection | None = None

    def _send(self, kind: str, data: dict[str, Any]) -> None:
        self._emit({"kind": kind, "data": data})

    def sync_started(self, remote: str, direction: SyncDirection) -> None:
        self._remote = remote
        self._direction = direction
        self._send("sync_started", {"remote": remote, "direction": direction.value})

    def sync_progress(self, processed: int, total: int, result: TaskResult) -> None:
        self._send(
            "sync_progress",
            {
                "remote": self._remote,
                "processed": processed,
                "total": total,
                "entry": result.model_dump(mode="json"),
            },
        )

    def sync_completed(self, report: SyncRunReport) -> None:
        self._send(
            "sync_completed",
            {
                "run_id": report.run_id,
                "remote": report.remote,
                "status": report.status.value,
                "summary": report.summary.model_dump(mode="json"),
                "stored_path": report.stored_path,
            },
        )

    def sync_failed(self, reason: str) -> None:
        self._send(
            "sync_failed",
            {
                "remote": self._remote,
                "direction": self._direction.value if self._direction is not None else None,
                "reason": reason,
            },
        )
