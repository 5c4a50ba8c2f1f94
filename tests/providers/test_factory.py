from __future__ import annotations

import pytest

from tasksync.contracts.config import RemoteConfig, ResolvedAuth
from tasksync.contracts.exceptions import ConfigError
from tasksync.providers import factory
from tasksync.providers.factory import create_adapter, register
from tasksync.providers.github.adapter import GitHubAdapter
from tasksync.providers.jira.adapter import JiraAdapter
from tests.fakes.adapter import FakeAdapter


def test_create_adapter_picks_class_by_provider(
    jira_remote: RemoteConfig, github_remote: RemoteConfig, token_auth: ResolvedAuth
) -> None:
    assert isinstance(create_adapter(jira_remote, token_auth), JiraAdapter)
    assert isinstance(create_adapter(github_remote, token_auth), GitHubAdapter)


def test_create_adapter_rejects_unknown_provider(
    monkeypatch: pytest.MonkeyPatch, jira_remote: RemoteConfig, token_auth: ResolvedAuth
) -> None:
    monkeypatch.setattr(factory, "_REGISTRY", {"github": GitHubAdapter})

    with pytest.raises(ConfigError, match="unknown provider: 'jira'. Available: github"):
        create_adapter(jira_remote, token_auth)


def test_register_adds_provider(
    monkeypatch: pytest.MonkeyPatch, jira_remote: RemoteConfig, token_auth: ResolvedAuth
) -> None:
    monkeypatch.setattr(factory, "_REGISTRY", {})

    class _Registered(FakeAdapter):
        def __init__(self, remote: RemoteConfig, auth: ResolvedAuth) -> None:
            super().__init__(remote)
            self.auth = auth

    register("jira", _Registered)
    adapter = create_adapter(jira_remote, token_auth)

    assert isinstance(adapter, _Registered)
    assert adapter.auth is token_auth
