from __future__ import annotations

import re
from datetime import datetime, timezone

from tasksync.contracts.config import RemoteConfig
from tasksync.contracts.report import RunStatus, SyncDirection, SyncOutcome, TaskResult
from tasksync.engine.report import ReportBuilder, make_run_id, utc_now


def _builder(remote: RemoteConfig, **overrides: object) -> ReportBuilder:
    values: dict[str, object] = {
        "remote_name": "jira",
        "remote": remote,
        "direction": SyncDirection.PUSH,
        "project": "PROJ",
        "dry_run": False,
    }
    values.update(overrides)
    return ReportBuilder(**values)  # type: ignore[arg-type]


def test_make_run_id_is_unique_and_timestamped() -> None:
    moment = datetime(2025, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)

    first = make_run_id(moment)
    second = make_run_id(moment)

    assert first.startswith("sync-20250304T050607.890Z-")
    assert first != second


def test_utc_now_uses_millisecond_precision() -> None:
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", utc_now())


def test_build_counts_outcomes(jira_remote: RemoteConfig) -> None:
    builder = _builder(jira_remote)
    builder.add(TaskResult(task_id="PROJ-1", outcome=SyncOutcome.CREATED))
    builder.add(TaskResult(task_id="PROJ-2", outcome=SyncOutcome.FAILED, reason="boom"))
    builder.add(TaskResult(task_id="PROJ-3", outcome=SyncOutcome.SKIPPED))

    report = builder.build()

    assert report.summary.created == 1
    assert report.summary.failed == 1
    assert report.summary.skipped == 1
    assert report.summary.total == 3
    assert report.status is RunStatus.OK
    assert report.provider == "jira"
    assert [result.task_id for result in report.failures] == ["PROJ-2"]


def test_build_can_sort_results_by_task_then_external_id(jira_remote: RemoteConfig) -> None:
    builder = _builder(jira_remote, direction=SyncDirection.PULL)
    builder.add(TaskResult(task_id="PROJ-2", outcome=SyncOutcome.UPDATED))
    builder.add(TaskResult(external_id="PROJ-9", outcome=SyncOutcome.FAILED))
    builder.add(TaskResult(task_id="PROJ-1", outcome=SyncOutcome.SKIPPED))

    assert [result.task_id for result in builder.build().results] == ["PROJ-2", None, "PROJ-1"]
    assert [result.task_id for result in builder.build(sort_results=True).results] == [None, "PROJ-1", "PROJ-2"]


def test_warnings_are_deduplicated(jira_remote: RemoteConfig) -> None:
    builder = _builder(jira_remote, dry_run=True)
    builder.warn("search is capped")
    builder.warn("search is capped")
    builder.note("dry run")

    report = builder.build(status=RunStatus.CANCELLED)

    assert report.warnings == ["search is capped"]
    assert report.info == ["dry run"]
    assert report.dry_run is True
    assert report.status is RunStatus.CANCELLED
