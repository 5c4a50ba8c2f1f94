"""Run orchestration: one explicit pull or push of one remote."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from tasksync.auth.base import CredentialProvider
from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import RemoteConfig, ResolvedAuth
from tasksync.contracts.exceptions import (
    ConcurrentRunError,
    ConfigError,
    SyncError,
    TaskSyncError,
)
from tasksync.contracts.issue import RemoteIssue
from tasksync.contracts.report import RunStatus, SyncDirection, SyncOutcome, SyncRunReport, TaskResult
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import Task
from tasksync.engine.cancellation import CancellationToken
from tasksync.engine.mapping import compile_mapping
from tasksync.engine.progress import NullSyncProgress, SyncProgress
from tasksync.engine.reconciler import Reconciler
from tasksync.engine.report import ReportBuilder
from tasksync.persistence.reports import ReportStore
from tasksync.providers.dry_run import DryRunAdapter
from tasksync.store.dry_run import DryRunTaskStore

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[RemoteConfig, ResolvedAuth], RemoteAdapter]


@dataclass(frozen=True)
class RunOptions:
    remote_name: str
    project: str | None = None
    dry_run: bool = False
    auth_profile: str | None = None
    strict: bool = False
    max_concurrent: int = 1
    write_report: bool = True
    cancel_token: CancellationToken = field(default_factory=CancellationToken)


class RunRegistry:
    """At most one active run per remote name, process-wide."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: set[str] = set()

    def is_active(self, remote_name: str) -> bool:
        with self._lock:
            return remote_name in self._active

    @contextmanager
    def acquire(self, remote_name: str) -> Iterator[None]:
        with self._lock:
            if remote_name in self._active:
                raise ConcurrentRunError(f"a sync run for remote {remote_name!r} is already in progress")
            self._active.add(remote_name)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(remote_name)


RUN_REGISTRY = RunRegistry()


def resolve_profile_name(remote: RemoteConfig, override: str | None) -> str:
    name = (override or remote.auth_profile or "").strip()
    if not name:
        raise ConfigError("no auth profile: set auth_profile on the remote or pass --auth-profile")
    return name


class SyncOrchestrator:
    def __init__(
        self,
        *,
        store: TaskStore,
        credentials: CredentialProvider,
        adapter_factory: AdapterFactory,
        reports: ReportStore | None = None,
        progress: SyncProgress | None = None,
        registry: RunRegistry | None = None,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._adapter_factory = adapter_factory
        self._reports = reports
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._registry = registry or RUN_REGISTRY

    async def run(self, remote: RemoteConfig, direction: SyncDirection, options: RunOptions) -> SyncRunReport:
        """Execute one run and return its report.

        Raises:
            ConfigError: Malformed mapping, missing project or auth profile name.
            AuthError: Credentials cannot be resolved or are rejected by the remote.
            ConcurrentRunError: A run for the same remote is already in flight.
            SyncError: ``strict`` is on and an item failed.
        """
        try:
            with self._registry.acquire(options.remote_name):
                self._progress.sync_started(options.remote_name, direction)
                report = await self._run(remote, direction, options)
        except TaskSyncError as exc:
            logger.debug("run for %s aborted: %s", options.remote_name, exc)
            self._progress.sync_failed(str(exc))
            raise

        self._progress.sync_completed(report)
        return report

    async def _run(self, remote: RemoteConfig, direction: SyncDirection, options: RunOptions) -> SyncRunReport:
        rules = compile_mapping(remote.mapping)
        project = (options.project or "").strip() or None
        if project is None:
            raise ConfigError(f"{direction.value} needs a project: pass --project or set default_project")

        auth = await self._credentials.resolve_auth_profile(
            resolve_profile_name(remote, options.auth_profile), provider=remote.provider
        )
        adapter = self._adapter_factory(remote, auth)
        store = self._store
        if options.dry_run:
            adapter = DryRunAdapter(adapter, remote)
            store = DryRunTaskStore(store)

        builder = ReportBuilder(
            remote_name=options.remote_name,
            remote=remote,
            direction=direction,
            project=project,
            dry_run=options.dry_run,
        )
        logger.info("%s %s (%s) run %s", direction.value, options.remote_name, remote.target, builder.run_id)

        async with adapter:
            reconciler = Reconciler(
                remote=remote,
                rules=rules,
                adapter=adapter,
                store=store,
                project=project,
                cancel_token=options.cancel_token,
            )
            items: list[Any]
            listing_stopped = False
            if direction is SyncDirection.PULL:
                stream = adapter.fetch_issues(remote.filter)
                items = await stream.collect(stop=lambda: options.cancel_token.cancelled)
                listing_stopped = stream.stopped
                for warning in stream.warnings:
                    builder.warn(warning)
                if stream.truncated:
                    builder.warn(
                        f"remote listing truncated after {stream.fetched} issues; narrow the filter to sync the rest"
                    )
                handler: Callable[[Any], Any] = reconciler.pull
            else:
                items = store.list_tasks_for_project(project)
                handler = reconciler.push

            if options.max_concurrent > 1 and len(items) > 1:
                cancelled = await self._run_concurrent(items, handler, builder, options)
            else:
                cancelled = await self._run_sequential(items, handler, builder, options)
            cancelled = cancelled or listing_stopped or reconciler.cancelled_items > 0

        for warning in reconciler.warnings:
            builder.warn(warning)
        if options.dry_run:
            builder.note("dry run: no changes were written")
        if listing_stopped:
            builder.note(f"cancelled while listing remote issues after {len(items)} issues")
        if cancelled:
            builder.note(f"cancelled after {len(builder.results)} of {len(items)} items")

        report = builder.build(
            status=RunStatus.CANCELLED if cancelled else RunStatus.OK,
            sort_results=options.max_concurrent > 1,
        )
        self._persist(report, options)
        logger.info(
            "run %s finished: %d created, %d updated, %d skipped, %d failed",
            report.run_id,
            report.summary.created,
            report.summary.updated,
            report.summary.skipped,
            report.summary.failed,
        )
        return report

    def _record(self, result: TaskResult, builder: ReportBuilder, total: int, options: RunOptions) -> None:
        builder.add(result)
        self._progress.sync_progress(len(builder.results), total, result)
        if options.strict and result.outcome is SyncOutcome.FAILED:
            label = result.task_id or result.external_id or "item"
            raise SyncError(f"{label} failed in strict mode: {result.reason}")

    async def _run_sequential(
        self,
        items: list[Task] | list[RemoteIssue],
        handler: Callable[[Any], Any],
        builder: ReportBuilder,
        options: RunOptions,
    ) -> bool:
        for item in items:
            if options.cancel_token.cancelled:
                return True
            self._record(await handler(item), builder, len(items), options)
        return False

    async def _run_concurrent(
        self,
        items: list[Task] | list[RemoteIssue],
        handler: Callable[[Any], Any],
        builder: ReportBuilder,
        options: RunOptions,
    ) -> bool:
        semaphore = asyncio.Semaphore(options.max_concurrent)
        skipped = 0

        async def worker(item: Any) -> None:
            nonlocal skipped
            async with semaphore:
                if options.cancel_token.cancelled:
                    skipped += 1
                    return
                result = await handler(item)
            self._record(result, builder, len(items), options)

        try:
            async with asyncio.TaskGroup() as tg:
                for item in items:
                    tg.create_task(worker(item))
        except* TaskSyncError as error_group:
            first_error = error_group.exceptions[0]
            raise first_error from error_group
        return skipped > 0

    def _persist(self, report: SyncRunReport, options: RunOptions) -> None:
        if self._reports is None or not options.write_report:
            return
        try:
            report.stored_path = self._reports.write(report)
        except TaskSyncError as exc:
            logger.warning("could not persist report %s: %s", report.run_id, exc)
            report.warnings.append(f"report not persisted: {exc}")
