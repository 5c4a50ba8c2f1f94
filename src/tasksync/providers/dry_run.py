"""Dry-run adapter stand-in."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import TracebackType

from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import RemoteConfig
from tasksync.contracts.issue import IssueStream, RemoteIssue
from tasksync.contracts.task import FieldValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DryRunOperation:
    """Deterministic dry-run operation log entry."""

    sequence: int
    name: str
    item_id: str | None
    payload: dict[str, FieldValue] = field(default_factory=dict)


class DryRunAdapter(RemoteAdapter):
    """Passes reads through to *inner* and records writes instead of sending them.

    Created issues get a placeholder id with issue number ``0``, which neither
    Jira nor GitHub ever assigns, so the id still parses as a reference.
    """

    def __init__(self, inner: RemoteAdapter, remote: RemoteConfig) -> None:
        self._inner = inner
        self._remote = remote
        self._operations: list[DryRunOperation] = []

    @property
    def operations(self) -> tuple[DryRunOperation, ...]:
        return tuple(self._operations)

    def _record_operation(self, name: str, item_id: str | None, payload: dict[str, FieldValue]) -> None:
        self._operations.append(
            DryRunOperation(sequence=len(self._operations) + 1, name=name, item_id=item_id, payload=dict(payload))
        )
        logger.debug("dry-run %s %s", name, item_id or "")

    def _placeholder_id(self) -> str:
        if self._remote.provider == "github":
            return f"{self._remote.target}#0"
        return f"{self._remote.target}-0"

    async def __aenter__(self) -> DryRunAdapter:
        await self._inner.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._inner.__aexit__(exc_type, exc_val, exc_tb)

    def fetch_issues(self, filter: str | None = None) -> IssueStream:
        return self._inner.fetch_issues(filter)

    async def fetch_issue(self, external_id: str) -> RemoteIssue:
        return await self._inner.fetch_issue(external_id)

    async def create_issue(self, fields: dict[str, FieldValue]) -> RemoteIssue:
        issue_id = self._placeholder_id()
        self._record_operation("create_issue", issue_id, fields)
        return RemoteIssue(external_id=issue_id, fields=dict(fields))

    async def update_issue(self, external_id: str, fields: dict[str, FieldValue]) -> RemoteIssue:
        self._record_operation("update_issue", external_id, fields)
        return RemoteIssue(external_id=external_id, fields=dict(fields))

    async def check(self, filter: str | None = None) -> list[str]:
        return await self._inner.check(filter)
