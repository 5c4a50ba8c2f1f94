"""Shared test fixtures for tasksync tests."""

from __future__ import annotations

import pytest

from tasksync.contracts.config import RemoteConfig, ResolvedAuth
from tasksync.engine.orchestrator import RunRegistry
from tests.fakes.adapter import FakeAdapter
from tests.fakes.credentials import StaticCredentialProvider
from tests.fakes.progress import RecordingProgress
from tests.fakes.store import InMemoryTaskStore

JIRA_MAPPING = {
    "title": "summary",
    "description": "description",
    "status": {"field": "status", "values": {"Todo": "To Do", "In Progress": "In Progress", "Done": "Done"}},
}


@pytest.fixture
def jira_remote() -> RemoteConfig:
    return RemoteConfig(provider="jira", project="PROJ", auth_profile="jira-work", mapping=JIRA_MAPPING)


@pytest.fixture
def github_remote() -> RemoteConfig:
    return RemoteConfig(
        provider="github",
        repo="Acme/Widgets",
        auth_profile="gh",
        mapping={
            "title": "title",
            "status": {"field": "state", "values": {"Todo": "open", "Done": "closed"}},
        },
    )


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def credentials() -> StaticCredentialProvider:
    return StaticCredentialProvider()


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def registry() -> RunRegistry:
    return RunRegistry()


@pytest.fixture
def jira_adapter(jira_remote: RemoteConfig) -> FakeAdapter:
    return FakeAdapter(jira_remote)


@pytest.fixture
def token_auth() -> ResolvedAuth:
    return ResolvedAuth(profile="test", method="token", token="secret-token")
