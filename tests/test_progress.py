"""Tests for RichSyncProgress and NullSyncProgress."""

from __future__ import annotations

import io

from rich.console import Console

from tasksync.cli.progress.rich import RichSyncProgress
from tasksync.contracts.report import RunStatus, SyncDirection, SyncOutcome, SyncRunReport, TaskResult
from tasksync.engine.progress import NullSyncProgress, SyncProgress

_RESULT = TaskResult(task_id="PROJ-1", outcome=SyncOutcome.CREATED)


def _report(status: RunStatus = RunStatus.OK) -> SyncRunReport:
    return SyncRunReport(
        run_id="sync-1",
        remote="jira",
        provider="jira",
        direction=SyncDirection.PULL,
        started_at="2025-01-01T00:00:00.000Z",
        status=status,
    )


def _progress() -> RichSyncProgress:
    return RichSyncProgress(Console(file=io.StringIO(), force_terminal=False))


class TestNullSyncProgress:
    """NullSyncProgress is a no-op implementation."""

    def test_implements_protocol(self) -> None:
        assert issubclass(NullSyncProgress, SyncProgress)

    def test_lifecycle_is_noop(self) -> None:
        progress = NullSyncProgress()
        progress.sync_started("jira", SyncDirection.PULL)
        progress.sync_progress(1, 1, _RESULT)
        progress.sync_completed(_report())
        progress.sync_failed("boom")


class TestRichSyncProgress:
    """RichSyncProgress drives one Rich progress bar per run."""

    def test_implements_protocol(self) -> None:
        assert issubclass(RichSyncProgress, SyncProgress)

    def test_context_manager(self) -> None:
        progress = _progress()
        with progress as p:
            assert p is progress

    def test_determinate_run(self) -> None:
        with _progress() as progress:
            progress.sync_started("jira", SyncDirection.PUSH)
            progress.sync_progress(1, 2, _RESULT)
            progress.sync_progress(2, 2, _RESULT)
            progress.sync_completed(_report())

            task = progress._progress.tasks[0]
            assert (task.completed, task.total) == (2, 2)

    def test_empty_run_completes_bar(self) -> None:
        with _progress() as progress:
            progress.sync_started("jira", SyncDirection.PULL)
            progress.sync_completed(_report())

            task = progress._progress.tasks[0]
            assert (task.completed, task.total) == (1, 1)

    def test_cancelled_and_failed_runs_relabel_bar(self) -> None:
        with _progress() as progress:
            progress.sync_started("jira", SyncDirection.PULL)
            progress.sync_progress(1, 3, _RESULT)
            progress.sync_completed(_report(RunStatus.CANCELLED))
            assert "cancelled" in progress._progress.tasks[0].description

            progress.sync_failed("boom")
            assert "✗" in progress._progress.tasks[0].description

    def test_events_before_start_are_noop(self) -> None:
        with _progress() as progress:
            progress.sync_progress(1, 1, _RESULT)
            progress.sync_completed(_report())
            progress.sync_failed("boom")
            assert progress._progress.tasks == []
