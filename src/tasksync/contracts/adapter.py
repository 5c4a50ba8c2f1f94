"""Remote platform adapter contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from tasksync.contracts.issue import IssueStream, RemoteIssue
from tasksync.contracts.task import FieldValue


class RemoteAdapter(ABC):
    """Uniform fetch/create/update contract implemented per platform.

    Adapters raise only :class:`~tasksync.contracts.exceptions.AdapterError`
    subclasses. Field names in ``fields`` payloads are remote field names as
    written in the mapping configuration; translating them to wire formats is
    the adapter's job.
    """

    @abstractmethod
    async def __aenter__(self) -> RemoteAdapter: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    def fetch_issues(self, filter: str | None = None) -> IssueStream: ...  # pragma: no cover

    @abstractmethod
    async def fetch_issue(self, external_id: str) -> RemoteIssue: ...  # pragma: no cover

    @abstractmethod
    async def create_issue(self, fields: dict[str, FieldValue]) -> RemoteIssue: ...  # pragma: no cover

    @abstractmethod
    async def update_issue(self, external_id: str, fields: dict[str, FieldValue]) -> RemoteIssue: ...  # pragma: no cover

    @abstractmethod
    async def check(self, filter: str | None = None) -> list[str]: ...  # pragma: no cover
