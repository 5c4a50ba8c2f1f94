"""Remote issue contracts."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable

from pydantic import BaseModel, Field

from tasksync.contracts.task import FieldValue


class RemoteIssue(BaseModel):
    external_id: str
    fields: dict[str, FieldValue] = Field(default_factory=dict)
    url: str | None = None

    model_config = {"frozen": True}


PageFetcher = Callable[[], AsyncIterator[list[RemoteIssue]]]


class IssueStream:
    """Lazy, paged sequence of remote issues.

    Pages are pulled from *pages* only as the stream is iterated. When *cap* is
    reached and the provider still has results, iteration stops and
    :attr:`truncated` becomes ``True`` so callers can surface the cut-off
    instead of silently dropping issues. Adapters may append caveats about the
    listing to :attr:`warnings`. :attr:`stopped` is set when a caller-supplied
    stop check ended the listing between pages.
    """

    def __init__(self, pages: PageFetcher, *, cap: int | None = None) -> None:
        self._pages = pages
        self._cap = cap
        self.truncated = False
        self.warnings: list[str] = []
        self.fetched = 0
        self.stopped = False

    @classmethod
    def from_issues(cls, issues: Iterable[RemoteIssue], *, cap: int | None = None) -> IssueStream:
        snapshot = list(issues)

        async def pages() -> AsyncIterator[list[RemoteIssue]]:
            if snapshot:
                yield snapshot

        return cls(pages, cap=cap)

    def __aiter__(self) -> AsyncIterator[RemoteIssue]:
        return self._iterate()

    async def _iterate(self, stop: Callable[[], bool] | None = None) -> AsyncIterator[RemoteIssue]:
        async for page in self._pages():
            for issue in page:
                if self._cap is not None and self.fetched >= self._cap:
                    self.truncated = True
                    return
                self.fetched += 1
                yield issue
            if stop is not None and stop():
                self.stopped = True
                return

    async def collect(self, stop: Callable[[], bool] | None = None) -> list[RemoteIssue]:
        """Drain the stream; *stop* is polled between pages and ends the listing early."""
        return [issue async for issue in self._iterate(stop)]
