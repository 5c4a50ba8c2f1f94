from __future__ import annotations

from typing import Any

from tasksync.contracts.report import RunStatus, SyncDirection, SyncOutcome, SyncRunReport, SyncSummary, TaskResult
from tasksync.engine.cancellation import CancellationToken
from tasksync.engine.progress import EventSyncProgress, NullSyncProgress


def _report() -> SyncRunReport:
    return SyncRunReport(
        run_id="sync-1",
        remote="jira",
        provider="jira",
        direction=SyncDirection.PULL,
        started_at="2025-01-01T00:00:00.000Z",
        status=RunStatus.OK,
        summary=SyncSummary(created=1),
        stored_path="jira-2025-01-01T00-00-00-1.json",
    )


def test_event_progress_emits_kind_and_data() -> None:
    events: list[dict[str, Any]] = []
    progress = EventSyncProgress(events.append)

    progress.sync_started("jira", SyncDirection.PULL)
    progress.sync_progress(1, 2, TaskResult(task_id="PROJ-1", outcome=SyncOutcome.CREATED))
    progress.sync_completed(_report())

    assert [event["kind"] for event in events] == ["sync_started", "sync_progress", "sync_completed"]
    assert events[0]["data"] == {"remote": "jira", "direction": "pull"}
    assert events[1]["data"]["processed"] == 1
    assert events[1]["data"]["total"] == 2
    assert events[1]["data"]["entry"]["outcome"] == "created"
    assert events[2]["data"] == {
        "run_id": "sync-1",
        "remote": "jira",
        "status": "ok",
        "summary": {"created": 1, "updated": 0, "skipped": 0, "failed": 0},
        "stored_path": "jira-2025-01-01T00-00-00-1.json",
    }


def test_event_progress_failure_carries_run_context() -> None:
    events: list[dict[str, Any]] = []
    progress = EventSyncProgress(events.append)

    progress.sync_started("gh", SyncDirection.PUSH)
    progress.sync_failed("token revoked")

    assert events[-1] == {
        "kind": "sync_failed",
        "data": {"remote": "gh", "direction": "push", "reason": "token revoked"},
    }


def test_null_progress_accepts_all_events() -> None:
    progress = NullSyncProgress()

    progress.sync_started("jira", SyncDirection.PULL)
    progress.sync_progress(1, 1, TaskResult(outcome=SyncOutcome.SKIPPED))
    progress.sync_completed(_report())
    progress.sync_failed("reason")


def test_cancellation_token_is_sticky() -> None:
    token = CancellationToken()
    assert not token.cancelled

    token.cancel()
    token.cancel()

    assert token.cancelled
