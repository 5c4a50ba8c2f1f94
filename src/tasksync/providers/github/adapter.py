"""GitHub issues adapter (REST v3)."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from tasksync.contracts.exceptions import (
    AdapterError,
    AuthError,
    IncompleteCreateError,
    InvalidReferenceFormat,
    NotFound,
    RemoteValidationError,
)
from tasksync.contracts.issue import IssueStream, RemoteIssue
from tasksync.contracts.task import FieldValue
from tasksync.engine.reference import normalize, normalize_repo
from tasksync.providers._http import HttpAdapter

_LOG = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
SEARCH_CAP = 1000
SEARCH_WARNING = "GitHub filter uses the search API (results may omit fields and are capped at 1000)"
_PAGE_SIZE = 100

# Remote field name -> GitHub issue attribute.
_FIELD_ALIASES = {
    "title": "title",
    "body": "body",
    "description": "body",
    "state": "state",
    "status": "state",
    "labels": "labels",
    "assignees": "assignees",
}


def _names(items: Any, key: str) -> list[str]:
    if not isinstance(items, list):
        return []
    names: list[str] = []
    for item in items:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get(key), str):
            names.append(item[key])
    return names


def _as_text(value: FieldValue) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    return value


def _as_list(value: FieldValue) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [part.strip() for part in value.split(",") if part.strip()]


def build_search_query(repo: str, filter: str) -> str:
    query = f"repo:{repo} type:issue"
    if not any(token.lower().startswith("state:") for token in filter.split()):
        query += " state:all"
    return f"{query} {filter.strip()}"


class GitHubAdapter(HttpAdapter):
    """Issues of one repository. ``external_id`` is ``owner/repo#<number>``."""

    @property
    def base_url(self) -> str:
        return (self._auth.base_url or DEFAULT_API_URL).rstrip("/")

    @property
    def repo(self) -> str:
        return normalize_repo(self._remote.target)

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "application/vnd.github+json"
        headers["X-GitHub-Api-Version"] = "2022-11-28"
        return headers

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _to_issue(self, payload: dict[str, Any]) -> RemoteIssue:
        number = payload.get("number")
        if not isinstance(number, int):
            raise RemoteValidationError("GitHub issue payload is missing its number")
        state = payload.get("state") if isinstance(payload.get("state"), str) else None
        body = payload.get("body") if isinstance(payload.get("body"), str) else None
        fields: dict[str, FieldValue] = {
            "title": payload.get("title") if isinstance(payload.get("title"), str) else None,
            "body": body,
            "description": body,
            "state": state,
            "status": state,
            "labels": _names(payload.get("labels"), "name"),
            "assignees": _names(payload.get("assignees"), "login"),
        }
        url = payload.get("html_url") if isinstance(payload.get("html_url"), str) else None
        return RemoteIssue(external_id=f"{self.repo}#{number}", fields=fields, url=url)

    def _to_payload(self, fields: dict[str, FieldValue]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, value in fields.items():
            attribute = _FIELD_ALIASES.get(name.lower())
            if attribute is None:
                raise RemoteValidationError(f"GitHub issues have no field {name!r}")
            if attribute in {"labels", "assignees"}:
                payload[attribute] = _as_list(value)
            elif attribute == "state":
                state = _as_text(value).strip().lower()
                if state not in {"open", "closed"}:
                    raise RemoteValidationError(f"GitHub issue state must be open or closed, got {value!r}")
                payload[attribute] = state
            else:
                payload[attribute] = _as_text(value)
        return payload

    def _number(self, external_id: str) -> int:
        try:
            normalized = normalize(external_id, "github", default_repo=self.repo)
        except InvalidReferenceFormat as exc:
            raise NotFound(str(exc)) from exc
        repo, _, number = normalized.rpartition("#")
        if repo != self.repo:
            raise NotFound(f"{external_id} is not an issue of {self.repo}")
        return int(number)

    # ------------------------------------------------------------------
    # RemoteAdapter
    # ------------------------------------------------------------------

    def fetch_issues(self, filter: str | None = None) -> IssueStream:
        query = (filter if filter is not None else self._remote.filter or "").strip()
        if query:
            return self._search_stream(query)
        return IssueStream(self._list_pages)

    async def _list_pages(self) -> AsyncIterator[list[RemoteIssue]]:
        page = 1
        while True:
            batch = await self._request(
                "GET",
                f"/repos/{self.repo}/issues",
                params={"state": "all", "per_page": _PAGE_SIZE, "page": page},
            )
            if not isinstance(batch, list) or not batch:
                return
            yield [self._to_issue(item) for item in batch if "pull_request" not in item]
            if len(batch) < _PAGE_SIZE:
                return
            page += 1

    def _search_stream(self, filter: str) -> IssueStream:
        query = build_search_query(self.repo, filter)

        async def pages() -> AsyncIterator[list[RemoteIssue]]:
            page = 1
            processed = 0
            while True:
                payload = await self._request(
                    "GET", "/search/issues", params={"q": query, "per_page": _PAGE_SIZE, "page": page}
                )
                items = payload.get("items") if isinstance(payload, dict) else None
                if not items:
                    return
                processed += len(items)
                yield [self._to_issue(item) for item in items if "pull_request" not in item]
                total = payload.get("total_count")
                if processed >= SEARCH_CAP:
                    if isinstance(total, int) and total > processed:
                        stream.truncated = True
                        _LOG.warning("GitHub search for %s truncated at %d of %d issues", self.repo, processed, total)
                    return
                if len(items) < _PAGE_SIZE:
                    return
                page += 1

        stream = IssueStream(pages, cap=SEARCH_CAP)
        stream.warnings.append(SEARCH_WARNING)
        return stream

    async def fetch_issue(self, external_id: str) -> RemoteIssue:
        number = self._number(external_id)
        payload = await self._request("GET", f"/repos/{self.repo}/issues/{number}")
        if not isinstance(payload, dict) or "pull_request" in payload:
            raise NotFound(f"{self.repo}#{number} is not an issue")
        return self._to_issue(payload)

    async def create_issue(self, fields: dict[str, FieldValue]) -> RemoteIssue:
        payload = self._to_payload(fields)
        if not payload.get("title"):
            raise RemoteValidationError("GitHub issues need a non-empty title")
        state = payload.pop("state", None)
        created = await self._request("POST", f"/repos/{self.repo}/issues", json=payload)
        issue = self._to_issue(created)
        if state == "closed":
            number = self._number(issue.external_id)
            try:
                closed = await self._request("PATCH", f"/repos/{self.repo}/issues/{number}", json={"state": "closed"})
            except AuthError:
                raise
            except AdapterError as exc:
                raise IncompleteCreateError(
                    f"created {issue.external_id} but could not close it: {exc}", external_id=issue.external_id
                ) from exc
            issue = self._to_issue(closed)
        _LOG.debug("created %s", issue.external_id)
        return issue

    async def update_issue(self, external_id: str, fields: dict[str, FieldValue]) -> RemoteIssue:
        number = self._number(external_id)
        payload = self._to_payload(fields)
        updated = await self._request("PATCH", f"/repos/{self.repo}/issues/{number}", json=payload)
        return self._to_issue(updated)

    async def check(self, filter: str | None = None) -> list[str]:
        await self._request("GET", f"/repos/{self.repo}")
        warnings: list[str] = []
        query = (filter if filter is not None else self._remote.filter or "").strip()
        if query:
            warnings.append(SEARCH_WARNING)
            await self._request(
                "GET",
                "/search/issues",
                params={"q": build_search_query(self.repo, query), "per_page": 1, "page": 1},
            )
        return warnings
