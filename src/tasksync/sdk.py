"""SDK composition root for tasksync."""

from __future__ import annotations

import logging
from pathlib import Path

from tasksync.auth.base import CredentialProvider
from tasksync.auth.home import HomeConfigCredentialProvider
from tasksync.config.loader import load_home_config, load_project_config
from tasksync.contracts.config import HomeConfig, RemoteConfig, TaskSyncConfig
from tasksync.contracts.exceptions import ConfigError
from tasksync.contracts.report import SyncCheckResult, SyncDirection, SyncReportList, SyncRunReport
from tasksync.contracts.store import TaskStore
from tasksync.engine.cancellation import CancellationToken
from tasksync.engine.mapping import compile_mapping
from tasksync.engine.orchestrator import AdapterFactory, RunOptions, RunRegistry, SyncOrchestrator, resolve_profile_name
from tasksync.engine.progress import SyncProgress
from tasksync.engine.report import utc_now
from tasksync.persistence.reports import ReportStore
from tasksync.providers.factory import create_adapter
from tasksync.store.json_store import JsonTaskStore

logger = logging.getLogger(__name__)


class TaskSync:
    """tasksync SDK public API."""

    def __init__(
        self,
        *,
        config: TaskSyncConfig,
        store: TaskStore | None = None,
        credentials: CredentialProvider | None = None,
        home: HomeConfig | None = None,
        adapter_factory: AdapterFactory = create_adapter,
        reports: ReportStore | None = None,
        progress: SyncProgress | None = None,
        registry: RunRegistry | None = None,
    ) -> None:
        self._config = config
        self._store = store or JsonTaskStore(config.tasks_dir)
        self._credentials = credentials or HomeConfigCredentialProvider(home or HomeConfig())
        self._adapter_factory = adapter_factory
        self._reports = reports or ReportStore(config.sync.reports_dir)
        self._progress = progress
        self._registry = registry

    @classmethod
    def from_config_files(
        cls,
        config_path: str | Path | None = None,
        home_config_path: str | Path | None = None,
        *,
        progress: SyncProgress | None = None,
    ) -> TaskSync:
        config = load_project_config(config_path)
        home = load_home_config(home_config_path)
        return cls(config=config, home=home, progress=progress)

    @property
    def config(self) -> TaskSyncConfig:
        return self._config

    def remote(self, name: str) -> RemoteConfig:
        remote = self._config.remotes.get(name)
        if remote is None:
            available = ", ".join(sorted(self._config.remotes)) or "(none configured)"
            raise ConfigError(f"unknown remote {name!r}. Available: {available}")
        return remote

    async def pull(
        self,
        remote_name: str,
        *,
        project: str | None = None,
        dry_run: bool = False,
        auth_profile: str | None = None,
        strict: bool = False,
        write_report: bool | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> SyncRunReport:
        return await self._run(
            SyncDirection.PULL,
            remote_name,
            project=project,
            dry_run=dry_run,
            auth_profile=auth_profile,
            strict=strict,
            write_report=write_report,
            cancel_token=cancel_token,
        )

    async def push(
        self,
        remote_name: str,
        *,
        project: str | None = None,
        dry_run: bool = False,
        auth_profile: str | None = None,
        strict: bool = False,
        write_report: bool | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> SyncRunReport:
        return await self._run(
            SyncDirection.PUSH,
            remote_name,
            project=project,
            dry_run=dry_run,
            auth_profile=auth_profile,
            strict=strict,
            write_report=write_report,
            cancel_token=cancel_token,
        )

    async def _run(
        self,
        direction: SyncDirection,
        remote_name: str,
        *,
        project: str | None,
        dry_run: bool,
        auth_profile: str | None,
        strict: bool,
        write_report: bool | None,
        cancel_token: CancellationToken | None,
    ) -> SyncRunReport:
        remote = self.remote(remote_name)
        options = RunOptions(
            remote_name=remote_name,
            project=project or self._config.default_project,
            dry_run=dry_run,
            auth_profile=auth_profile,
            strict=strict,
            max_concurrent=self._config.sync.max_concurrent,
            write_report=self._config.sync.write_reports if write_report is None else write_report,
            cancel_token=cancel_token or CancellationToken(),
        )
        orchestrator = SyncOrchestrator(
            store=self._store,
            credentials=self._credentials,
            adapter_factory=self._adapter_factory,
            reports=self._reports,
            progress=self._progress,
            registry=self._registry,
        )
        return await orchestrator.run(remote, direction, options)

    async def check(self, remote_name: str, *, auth_profile: str | None = None) -> SyncCheckResult:
        """Validate a remote's mapping, credentials, target and filter without syncing."""
        remote = self.remote(remote_name)
        rules = compile_mapping(remote.mapping)
        auth = await self._credentials.resolve_auth_profile(
            resolve_profile_name(remote, auth_profile), provider=remote.provider
        )
        async with self._adapter_factory(remote, auth) as adapter:
            warnings = await adapter.check(remote.filter)
        logger.info("check %s: ok (%d rules)", remote_name, len(rules))
        return SyncCheckResult(
            provider=remote.provider,
            remote=remote_name,
            target=remote.target,
            filter=remote.filter,
            checked_at=utc_now(),
            rules=len(rules),
            warnings=warnings,
        )

    def list_reports(self, *, project: str | None = None, limit: int = 20, offset: int = 0) -> SyncReportList:
        return self._reports.list(project=project, limit=limit, offset=offset)

    def read_report(self, relative_path: str) -> SyncRunReport:
        return self._reports.read(relative_path)
