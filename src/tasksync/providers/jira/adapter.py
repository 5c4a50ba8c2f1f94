"""Jira Cloud adapter (REST v3).

Quirks handled here so the engine never sees them:

- ``description`` is Atlassian Document Format on the wire and plain text in
  :class:`RemoteIssue` fields.
- ``status``, ``priority`` and ``issuetype`` are name-valued; ``status`` can
  only change through a workflow transition.
- ``assignee`` / ``reporter`` are read as email, display name or account id,
  and written as an account id (looked up via user search when needed).
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from typing import Any

from tasksync.contracts.exceptions import (
    AdapterError,
    AuthError,
    ConfigError,
    IncompleteCreateError,
    RemoteValidationError,
)
from tasksync.contracts.issue import IssueStream, RemoteIssue
from tasksync.contracts.task import FieldValue
from tasksync.providers._http import HttpAdapter

_LOG = logging.getLogger(__name__)

_PAGE_SIZE = 50
_DEFAULT_ISSUE_TYPE = "Task"
_NAMED_FIELDS = frozenset({"priority", "issuetype"})
_USER_FIELDS = frozenset({"assignee", "reporter"})
_ACCOUNT_ID_RE = re.compile(r"^(?:[0-9a-f]{24}|\d+:[0-9a-f-]{36}|[A-Za-z0-9]{24,})$")


def adf_to_text(value: Any) -> str:
    """Flatten an ADF document to text, one line per top-level block."""
    if isinstance(value, str):
        return value
    if not isinstance(value, dict):
        return ""
    lines = ["".join(_collect_text(node)).strip() for node in value.get("content") or []]
    return "\n".join(lines).strip("\n")


def _collect_text(node: Any) -> list[str]:
    if isinstance(node, list):
        return [part for item in node for part in _collect_text(item)]
    if not isinstance(node, dict):
        return []
    parts = [node["text"]] if isinstance(node.get("text"), str) else []
    parts.extend(_collect_text(node.get("content") or []))
    return parts


def text_to_adf(text: str) -> dict[str, Any] | None:
    if not text.strip():
        return None
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": line}]} if line else {"type": "paragraph"}
            for line in text.split("\n")
        ],
    }


def _user_name(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    for key in ("emailAddress", "displayName", "accountId"):
        if isinstance(value.get(key), str) and value[key]:
            return value[key]
    return None


def _generic(value: Any) -> FieldValue:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return [item if isinstance(item, str) else str(item.get("value") or item.get("name") or "") for item in value]
    if isinstance(value, dict):
        for key in ("value", "name", "key"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def _text(value: FieldValue) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    return value


class JiraAdapter(HttpAdapter):
    """Issues of one Jira project. ``external_id`` is the issue key (``PROJ-12``)."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._account_ids: dict[str, str | None] = {}

    @property
    def base_url(self) -> str:
        if not self._auth.base_url:
            raise ConfigError(f"auth profile {self._auth.profile!r} must set api_url or base_url for Jira")
        return self._auth.base_url.rstrip("/")

    @property
    def project_key(self) -> str:
        return self._remote.target.upper()

    def jql(self, filter: str | None = None) -> str:
        query = (filter if filter is not None else self._remote.filter or "").strip()
        return query or f"project = {self.project_key}"

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _to_issue(payload: dict[str, Any]) -> RemoteIssue:
        key = payload.get("key")
        if not isinstance(key, str):
            raise RemoteValidationError("Jira issue payload is missing its key")
        raw = payload.get("fields") or {}
        fields: dict[str, FieldValue] = {}
        for name, value in raw.items():
            if name == "description":
                fields[name] = adf_to_text(value) or None
            elif name == "status" or name in _NAMED_FIELDS:
                fields[name] = value.get("name") if isinstance(value, dict) else None
            elif name in _USER_FIELDS:
                fields[name] = _user_name(value)
            elif name == "labels":
                fields[name] = [label for label in value or [] if isinstance(label, str)]
            else:
                fields[name] = _generic(value)
        url = payload.get("self") if isinstance(payload.get("self"), str) else None
        return RemoteIssue(external_id=key, fields=fields, url=url)

    async def _account_id(self, value: str) -> str | None:
        if _ACCOUNT_ID_RE.match(value):
            return value
        cache_key = value.lower()
        if cache_key not in self._account_ids:
            users = await self._request("GET", "/rest/api/3/user/search", params={"query": value, "maxResults": 1})
            found = None
            if isinstance(users, list) and users and isinstance(users[0], dict):
                found = users[0].get("accountId")
            self._account_ids[cache_key] = found if isinstance(found, str) else None
        return self._account_ids[cache_key]

    async def _to_payload(self, fields: dict[str, FieldValue]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, value in fields.items():
            if name == "status":
                continue
            if name == "description":
                payload[name] = text_to_adf(_text(value))
            elif name in _NAMED_FIELDS:
                payload[name] = {"name": _text(value)} if _text(value) else None
            elif name in _USER_FIELDS:
                text = _text(value).strip()
                if not text:
                    payload[name] = None
                    continue
                account_id = await self._account_id(text)
                if account_id is None:
                    raise RemoteValidationError(f"no Jira user matches {name} {text!r}")
                payload[name] = {"accountId": account_id}
            elif name == "labels":
                labels = value if isinstance(value, list) else [value] if value else []
                payload[name] = [label.strip().replace(" ", "-") for label in labels if label.strip()]
            else:
                payload[name] = value
        return payload

    async def _transition(self, key: str, status: str) -> None:
        url = f"/rest/api/3/issue/{key}/transitions"
        payload = await self._request("GET", url)
        transitions = payload.get("transitions") if isinstance(payload, dict) else None
        for transition in transitions or []:
            target = transition.get("to") or {}
            names = {str(transition.get("name", "")).lower(), str(target.get("name", "")).lower()}
            if status.lower() in names:
                await self._request("POST", url, json={"transition": {"id": transition["id"]}})
                return
        raise RemoteValidationError(f"no Jira transition leads {key} to status {status!r}")

    # ------------------------------------------------------------------
    # RemoteAdapter
    # ------------------------------------------------------------------

    def fetch_issues(self, filter: str | None = None) -> IssueStream:
        jql = self.jql(filter)

        async def pages() -> AsyncIterator[list[RemoteIssue]]:
            start_at = 0
            next_token: str | None = None
            while True:
                params: dict[str, Any] = {"jql": jql, "maxResults": _PAGE_SIZE, "fields": "*navigable"}
                if next_token is not None:
                    params["nextPageToken"] = next_token
                else:
                    params["startAt"] = start_at
                payload = await self._request("GET", "/rest/api/3/search/jql", params=params)
                batch = payload.get("issues") if isinstance(payload, dict) else None
                if not batch:
                    return
                yield [self._to_issue(item) for item in batch]

                next_token = payload.get("nextPageToken")
                start_at += len(batch)
                if next_token is None:
                    total = payload.get("total")
                    if payload.get("isLast") is True or not isinstance(total, int) or start_at >= total:
                        return

        return IssueStream(pages)

    async def fetch_issue(self, external_id: str) -> RemoteIssue:
        key = external_id.strip().upper()
        payload = await self._request("GET", f"/rest/api/3/issue/{key}", params={"fields": "*navigable"})
        return self._to_issue(payload)

    async def create_issue(self, fields: dict[str, FieldValue]) -> RemoteIssue:
        payload = await self._to_payload(fields)
        payload["project"] = {"key": self.project_key}
        payload.setdefault("issuetype", {"name": _DEFAULT_ISSUE_TYPE})
        created = await self._request("POST", "/rest/api/3/issue", json={"fields": payload})
        key = created.get("key") if isinstance(created, dict) else None
        if not isinstance(key, str):
            raise RemoteValidationError("Jira did not return the created issue key")
        status = _text(fields.get("status")).strip()
        if status:
            try:
                await self._transition(key, status)
            except AuthError:
                raise
            except AdapterError as exc:
                raise IncompleteCreateError(
                    f"created {key} but could not move it to {status!r}: {exc}", external_id=key
                ) from exc
        _LOG.debug("created %s", key)
        return RemoteIssue(external_id=key, fields=dict(fields), url=created.get("self"))

    async def update_issue(self, external_id: str, fields: dict[str, FieldValue]) -> RemoteIssue:
        """Write *fields*; the returned issue echoes what was written."""
        key = external_id.strip().upper()
        payload = await self._to_payload(fields)
        if payload:
            await self._request("PUT", f"/rest/api/3/issue/{key}", json={"fields": payload})
        status = _text(fields.get("status")).strip()
        if status:
            await self._transition(key, status)
        return RemoteIssue(external_id=key, fields=dict(fields))

    async def check(self, filter: str | None = None) -> list[str]:
        await self._request("GET", f"/rest/api/3/project/{self.project_key}")
        await self._request(
            "GET",
            "/rest/api/3/search/jql",
            params={"jql": self.jql(filter), "maxResults": 1, "fields": "summary"},
        )
        return []
