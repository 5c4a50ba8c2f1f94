"""Adapter factory.

Decouples adapter selection from adapter implementation: the orchestrator asks
for an adapter by provider name without importing concrete adapters.
"""

from __future__ import annotations

from typing import Any

from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import RemoteConfig, ResolvedAuth
from tasksync.contracts.exceptions import ConfigError
from tasksync.providers.github.adapter import GitHubAdapter
from tasksync.providers.jira.adapter import JiraAdapter

_REGISTRY: dict[str, type[RemoteAdapter]] = {
    "github": GitHubAdapter,
    "jira": JiraAdapter,
}


def register(name: str, adapter_cls: type[RemoteAdapter]) -> None:
    """Register an adapter class for the provider *name*."""
    _REGISTRY[name] = adapter_cls


def create_adapter(remote: RemoteConfig, auth: ResolvedAuth, **kwargs: Any) -> RemoteAdapter:
    """Create the adapter for ``remote.provider``.

    The returned adapter is an async context manager::

        async with create_adapter(remote, auth) as adapter:
            issue = await adapter.fetch_issue("PROJ-1")

    Raises:
        ConfigError: No adapter is registered for the provider.
    """
    adapter_cls = _REGISTRY.get(remote.provider)
    if adapter_cls is None:
        available = ", ".join(sorted(_REGISTRY)) or "(none registered)"
        raise ConfigError(f"unknown provider: {remote.provider!r}. Available: {available}")
    return adapter_cls(remote, auth, **kwargs)
