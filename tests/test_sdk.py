from __future__ import annotations

import json
from pathlib import Path

import pytest

from tasksync import TaskSync
from tasksync.auth.home import HomeConfigCredentialProvider
from tasksync.contracts.config import RemoteConfig, ResolvedAuth, SyncSettings, TaskSyncConfig
from tasksync.contracts.exceptions import AuthError, ConfigError
from tasksync.contracts.report import SyncDirection, SyncOutcome
from tasksync.engine.orchestrator import RunRegistry
from tasksync.persistence.reports import ReportStore
from tasksync.store.json_store import JsonTaskStore
from tests.conftest import JIRA_MAPPING
from tests.fakes.adapter import FakeAdapter
from tests.fakes.credentials import StaticCredentialProvider
from tests.fakes.store import InMemoryTaskStore


class _Factory:
    """Hands out one shared fake adapter and records the auth it was built with."""

    def __init__(self, adapter: FakeAdapter) -> None:
        self.adapter = adapter
        self.calls: list[tuple[RemoteConfig, ResolvedAuth]] = []

    def __call__(self, remote: RemoteConfig, auth: ResolvedAuth) -> FakeAdapter:
        self.calls.append((remote, auth))
        return self.adapter


def _config(tmp_path: Path, jira_remote: RemoteConfig, **sync: object) -> TaskSyncConfig:
    return TaskSyncConfig(
        default_project="PROJ",
        tasks_dir=tmp_path / "tasks",
        sync=SyncSettings(reports_dir=tmp_path / "reports", **sync),  # type: ignore[arg-type]
        remotes={"jira": jira_remote},
    )


def _sdk(
    tmp_path: Path,
    jira_remote: RemoteConfig,
    adapter: FakeAdapter,
    *,
    store: InMemoryTaskStore | None = None,
    credentials: StaticCredentialProvider | None = None,
    **sync: object,
) -> TaskSync:
    config = _config(tmp_path, jira_remote, **sync)
    return TaskSync(
        config=config,
        store=store or InMemoryTaskStore(),
        credentials=credentials or StaticCredentialProvider(),
        adapter_factory=_Factory(adapter),
        reports=ReportStore(config.sync.reports_dir),
        registry=RunRegistry(),
    )


@pytest.mark.asyncio
async def test_pull_uses_default_project_and_persists_report(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    adapter = FakeAdapter(jira_remote)
    adapter.add_issue("PROJ-5", summary="Investigate crash", status="To Do")
    store = InMemoryTaskStore()
    sdk = _sdk(tmp_path, jira_remote, adapter, store=store)

    report = await sdk.pull("jira")

    assert report.direction is SyncDirection.PULL
    assert report.project == "PROJ"
    assert [result.outcome for result in report.results] == [SyncOutcome.CREATED]
    task = store.find_by_reference("jira", "PROJ-5")
    assert task is not None
    assert task.fields == {"title": "Investigate crash", "status": "Todo"}
    assert report.stored_path is not None
    assert sdk.read_report(report.stored_path).run_id == report.run_id
    assert [meta.run_id for meta in sdk.list_reports().reports] == [report.run_id]


@pytest.mark.asyncio
async def test_push_respects_write_report_override(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    adapter = FakeAdapter(jira_remote)
    store = InMemoryTaskStore()
    store.add("PROJ", title="Ship it", status="Done")
    sdk = _sdk(tmp_path, jira_remote, adapter, store=store)

    report = await sdk.push("jira", write_report=False)

    assert adapter.create_calls == [{"summary": "Ship it", "status": "Done"}]
    assert report.stored_path is None
    assert sdk.list_reports().total == 0


@pytest.mark.asyncio
async def test_config_can_disable_report_writing(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    sdk = _sdk(tmp_path, jira_remote, FakeAdapter(jira_remote), write_reports=False)

    report = await sdk.pull("jira")

    assert report.stored_path is None
    assert not (tmp_path / "reports").exists()


@pytest.mark.asyncio
async def test_dry_run_push_leaves_store_and_remote_untouched(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    adapter = FakeAdapter(jira_remote)
    store = InMemoryTaskStore()
    store.add("PROJ", title="Ship it", status="Todo")
    sdk = _sdk(tmp_path, jira_remote, adapter, store=store)

    report = await sdk.push("jira", dry_run=True)

    assert report.dry_run is True
    assert [result.outcome for result in report.results] == [SyncOutcome.CREATED]
    assert adapter.mutating_calls == 0
    assert store.mutations == 0


@pytest.mark.asyncio
async def test_unknown_remote_is_a_config_error(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    sdk = _sdk(tmp_path, jira_remote, FakeAdapter(jira_remote))

    with pytest.raises(ConfigError, match="unknown remote 'gitlab'. Available: jira"):
        await sdk.pull("gitlab")


@pytest.mark.asyncio
async def test_auth_profile_override_reaches_credentials(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    credentials = StaticCredentialProvider()
    sdk = _sdk(tmp_path, jira_remote, FakeAdapter(jira_remote), credentials=credentials)

    await sdk.pull("jira", auth_profile="other")

    assert credentials.requests == [("other", "jira")]


@pytest.mark.asyncio
async def test_check_reports_rule_count_and_adapter_warnings(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    adapter = FakeAdapter(jira_remote)
    adapter.stream_warnings.append("filter matches nothing")
    sdk = _sdk(tmp_path, jira_remote, adapter)

    result = await sdk.check("jira")

    assert result.status == "ok"
    assert result.target == "PROJ"
    assert result.rules == len(JIRA_MAPPING)
    assert result.warnings == ["filter matches nothing"]
    assert adapter.check_calls == [None]
    assert (adapter.entered, adapter.exited) == (1, 1)


@pytest.mark.asyncio
async def test_check_propagates_auth_failures(tmp_path: Path, jira_remote: RemoteConfig) -> None:
    adapter = FakeAdapter(jira_remote)
    sdk = _sdk(tmp_path, jira_remote, adapter, credentials=StaticCredentialProvider(fail=True))

    with pytest.raises(AuthError):
        await sdk.check("jira")
    assert adapter.entered == 0


def test_from_config_files_wires_json_store_and_home_credentials(tmp_path: Path) -> None:
    config_path = tmp_path / "tasksync.json"
    config_path.write_text(
        json.dumps(
            {
                "default_project": "PROJ",
                "remotes": {"jira": {"provider": "jira", "project": "PROJ", "mapping": {"title": "summary"}}},
            }
        ),
        encoding="utf-8",
    )
    home_path = tmp_path / "home.json"
    home_path.write_text(json.dumps({"auth_profiles": {}}), encoding="utf-8")

    sdk = TaskSync.from_config_files(config_path, home_path)

    assert sdk.config.tasks_dir == (tmp_path / ".tasks").resolve()
    assert isinstance(sdk._store, JsonTaskStore)
    assert isinstance(sdk._credentials, HomeConfigCredentialProvider)
    assert sdk.remote("jira").target == "PROJ"
