"""Run report assembly."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

from tasksync.contracts.config import RemoteConfig
from tasksync.contracts.report import RunStatus, SyncDirection, SyncRunReport, SyncSummary, TaskResult

_RUN_COUNTER = itertools.count()


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_run_id(now: datetime | None = None) -> str:
    """Process-unique run id: ``sync-<UTC stamp>-<counter>``."""
    moment = now or datetime.now(timezone.utc)
    stamp = moment.strftime("%Y%m%dT%H%M%S.") + f"{moment.microsecond // 1000:03d}Z"
    return f"sync-{stamp}-{next(_RUN_COUNTER)}"


class ReportBuilder:
    """Accumulates item results for one run and produces the final report."""

    def __init__(
        self,
        *,
        remote_name: str,
        remote: RemoteConfig,
        direction: SyncDirection,
        project: str | None,
        dry_run: bool,
        run_id: str | None = None,
    ) -> None:
        self.run_id = run_id or make_run_id()
        self.started_at = utc_now()
        self._remote_name = remote_name
        self._provider = remote.provider
        self._direction = direction
        self._project = project
        self._dry_run = dry_run
        self._results: list[TaskResult] = []
        self._warnings: list[str] = []
        self._info: list[str] = []

    @property
    def results(self) -> list[TaskResult]:
        return list(self._results)

    def add(self, result: TaskResult) -> None:
        self._results.append(result)

    def warn(self, message: str) -> None:
        if message not in self._warnings:
            self._warnings.append(message)

    def note(self, message: str) -> None:
        self._info.append(message)

    def build(self, *, status: RunStatus = RunStatus.OK, sort_results: bool = False) -> SyncRunReport:
        """Finalize the report.

        *sort_results* re-orders results by task id, then external id; it is
        used when items were processed concurrently.
        """
        results = sorted(self._results, key=lambda result: result.sort_key) if sort_results else list(self._results)
        summary = SyncSummary()
        for result in results:
            summary.record(result.outcome)
        return SyncRunReport(
            run_id=self.run_id,
            remote=self._remote_name,
            provider=self._provider,
            direction=self._direction,
            project=self._project,
            dry_run=self._dry_run,
            status=status,
            started_at=self.started_at,
            finished_at=utc_now(),
            results=results,
            summary=summary,
            warnings=list(self._warnings),
            info=list(self._info),
        )
