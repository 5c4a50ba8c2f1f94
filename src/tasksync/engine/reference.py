"""Reference identity resolution.

A platform reference is the only identity key linking a local task to a remote
issue. This module normalizes raw reference strings and compares them by exact
string equality; there is deliberately no title or content fallback.

Grammars:

- ``jira``: ``PROJECT-123``; the project key is upper-cased.
- ``github``: ``owner/repo#123``; ``#123`` and ``123`` are accepted when a
  default repository is supplied. The repository part is lower-cased.

Both accept an optional, case-insensitive ``jira:`` / ``github:`` prefix.
"""

from __future__ import annotations

import re

from tasksync.contracts.config import RemoteConfig
from tasksync.contracts.exceptions import InvalidReferenceFormat
from tasksync.contracts.issue import RemoteIssue
from tasksync.contracts.task import ReferenceEntry, Task

_JIRA_RE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9_]*)-(?P<number>\d+)$")
_GITHUB_RE = re.compile(r"^(?:(?P<repo>[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+))?#(?P<number>\d+)$")
_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def _strip_prefix(raw: str, provider: str) -> str:
    trimmed = raw.strip()
    needle = f"{provider}:"
    if trimmed.lower().startswith(needle):
        return trimmed[len(needle) :].strip()
    return trimmed


def normalize_repo(repo: str) -> str:
    return repo.strip().strip("/").lower()


def normalize(raw: str, provider: str, *, default_repo: str | None = None) -> str:
    """Return the canonical form of *raw* for *provider*.

    Raises:
        InvalidReferenceFormat: *raw* does not match the provider grammar, or
            *provider* is unknown.
    """
    if provider == "jira":
        candidate = _strip_prefix(raw, "jira")
        matched = _JIRA_RE.match(candidate)
        if matched is None:
            raise InvalidReferenceFormat(
                f"invalid Jira reference {raw!r} (expected PROJECT-123)", raw=raw, provider=provider
            )
        return f"{matched['key'].upper()}-{int(matched['number'])}"

    if provider == "github":
        candidate = _strip_prefix(raw, "github")
        if candidate.isdigit():
            candidate = f"#{candidate}"
        matched = _GITHUB_RE.match(candidate)
        if matched is None:
            raise InvalidReferenceFormat(
                f"invalid GitHub reference {raw!r} (expected owner/repo#123)", raw=raw, provider=provider
            )
        repo = matched["repo"] or default_repo
        if not repo or not _REPO_RE.match(repo.strip().strip("/")):
            raise InvalidReferenceFormat(
                f"GitHub reference {raw!r} has no repository and no default repository applies",
                raw=raw,
                provider=provider,
            )
        return f"{normalize_repo(repo)}#{int(matched['number'])}"

    raise InvalidReferenceFormat(f"unknown provider {provider!r}", raw=raw, provider=provider)


def normalize_for_remote(raw: str, remote: RemoteConfig) -> str:
    default_repo = remote.repo if remote.provider == "github" else None
    return normalize(raw, remote.provider, default_repo=default_repo)


def in_scope(reference: str, remote: RemoteConfig) -> bool:
    """Whether a normalized *reference* belongs to the remote's project or repository."""
    if remote.provider == "jira":
        return reference.startswith(f"{remote.target.upper()}-")
    if remote.provider == "github":
        return reference.rsplit("#", 1)[0] == normalize_repo(remote.target)
    return False


def make_reference(raw: str, remote: RemoteConfig) -> ReferenceEntry:
    return ReferenceEntry(provider=remote.provider, external_id=normalize_for_remote(raw, remote))


def match(task: Task, issue: RemoteIssue, provider: str, *, default_repo: str | None = None) -> bool:
    """True only when the task's *provider* reference equals the issue id after normalization.

    A task without a *provider* reference never matches. Malformed values on
    either side raise :class:`InvalidReferenceFormat` rather than falling back
    to any other comparison.
    """
    reference = task.reference_for(provider)
    if reference is None:
        return False
    local = normalize(reference.external_id, provider, default_repo=default_repo)
    remote = normalize(issue.external_id, provider, default_repo=default_repo)
    return local == remote
