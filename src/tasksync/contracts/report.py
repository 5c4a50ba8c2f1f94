"""Sync run report contracts."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SyncDirection(str, Enum):
    PULL = "pull"
    PUSH = "push"


class SyncOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class RunStatus(str, Enum):
    OK = "ok"
    CANCELLED = "cancelled"


class TaskResult(BaseModel):
    """Outcome of reconciling one task/issue pair.

    Attributes:
        task_id: Local task id, when known.
        external_id: Normalized remote reference, when known.
        title: Task or issue title, for display.
        outcome: What happened (or, in a dry run, what would happen).
        reason: Failure message for ``failed``; a short note otherwise.
        fields: Names of the fields that were (or would be) written.
    """

    task_id: str | None = None
    external_id: str | None = None
    title: str | None = None
    outcome: SyncOutcome
    reason: str | None = None
    fields: list[str] = Field(default_factory=list)

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.task_id or "", self.external_id or "")


class SyncSummary(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped + self.failed

    def record(self, outcome: SyncOutcome) -> None:
        if outcome is SyncOutcome.CREATED:
            self.created += 1
        elif outcome is SyncOutcome.UPDATED:
            self.updated += 1
        elif outcome is SyncOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class SyncRunReport(BaseModel):
    run_id: str
    remote: str
    provider: str
    direction: SyncDirection
    project: str | None = None
    dry_run: bool = False
    status: RunStatus = RunStatus.OK
    started_at: str
    finished_at: str | None = None
    results: list[TaskResult] = Field(default_factory=list)
    summary: SyncSummary = Field(default_factory=SyncSummary)
    warnings: list[str] = Field(default_factory=list)
    info: list[str] = Field(default_factory=list)
    stored_path: str | None = None

    @property
    def failures(self) -> list[TaskResult]:
        return [result for result in self.results if result.outcome is SyncOutcome.FAILED]


class SyncReportMeta(BaseModel):
    """Listing entry for a persisted report."""

    run_id: str
    remote: str
    provider: str
    direction: SyncDirection
    project: str | None = None
    dry_run: bool = False
    status: RunStatus = RunStatus.OK
    started_at: str
    summary: SyncSummary = Field(default_factory=SyncSummary)
    entries_total: int = 0
    stored_path: str


class SyncReportList(BaseModel):
    total: int
    limit: int
    offset: int
    reports: list[SyncReportMeta] = Field(default_factory=list)


class SyncCheckResult(BaseModel):
    status: str = "ok"
    provider: str
    remote: str
    target: str
    filter: str | None = None
    checked_at: str
    rules: int = 0
    warnings: list[str] = Field(default_factory=list)
