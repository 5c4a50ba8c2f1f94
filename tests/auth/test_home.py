from __future__ import annotations

import pytest

from tasksync.auth.home import HomeConfigCredentialProvider
from tasksync.contracts.config import AuthProfile, HomeConfig
from tasksync.contracts.exceptions import AuthError


def _provider(environ: dict[str, str], **profiles: AuthProfile) -> HomeConfigCredentialProvider:
    return HomeConfigCredentialProvider(HomeConfig(auth_profiles=profiles), environ=environ)


@pytest.mark.asyncio
async def test_jira_profile_defaults_to_basic_auth() -> None:
    provider = _provider(
        {"JIRA_EMAIL": "me@example.com", "JIRA_TOKEN": "tok"},
        work=AuthProfile(
            provider="jira", email_env="JIRA_EMAIL", token_env="JIRA_TOKEN", base_url="https://acme.atlassian.net/"
        ),
    )

    auth = await provider.resolve_auth_profile("work", provider="jira")

    assert auth.method == "basic"
    assert auth.email == "me@example.com"
    assert auth.token == "tok"
    assert auth.base_url == "https://acme.atlassian.net"
    assert "tok" not in repr(auth)


@pytest.mark.asyncio
async def test_github_profile_defaults_to_token_auth_and_ignores_base_url() -> None:
    provider = _provider(
        {"GH_TOKEN": "ghp_x"},
        gh=AuthProfile(token_env="GH_TOKEN", base_url="https://github.com"),
    )

    auth = await provider.resolve_auth_profile("gh", provider="github")

    assert auth.method == "token"
    assert auth.email is None
    assert auth.base_url is None
    assert auth.provider == "github"


@pytest.mark.asyncio
async def test_missing_or_empty_variables_raise_auth_error() -> None:
    provider = _provider(
        {"JIRA_EMAIL": "me@example.com", "JIRA_TOKEN": "  "},
        work=AuthProfile(provider="jira", email_env="JIRA_EMAIL", token_env="JIRA_TOKEN", base_url="https://x"),
        noenv=AuthProfile(provider="github"),
    )

    with pytest.raises(AuthError, match="JIRA_TOKEN"):
        await provider.resolve_auth_profile("work", provider="jira")
    with pytest.raises(AuthError, match="token_env"):
        await provider.resolve_auth_profile("noenv", provider="github")


@pytest.mark.asyncio
async def test_profile_lookup_failures() -> None:
    provider = _provider(
        {"T": "x"},
        gh=AuthProfile(provider="github", token_env="T"),
        odd=AuthProfile(provider="github", method="oauth", token_env="T"),
        nourl=AuthProfile(provider="jira", method="token", token_env="T"),
    )

    with pytest.raises(AuthError, match="not defined"):
        await provider.resolve_auth_profile("missing")
    with pytest.raises(AuthError, match="is for github, not jira"):
        await provider.resolve_auth_profile("gh", provider="jira")
    with pytest.raises(AuthError, match="unsupported method"):
        await provider.resolve_auth_profile("odd", provider="github")
    with pytest.raises(AuthError, match="api_url or base_url"):
        await provider.resolve_auth_profile("nourl", provider="jira")
