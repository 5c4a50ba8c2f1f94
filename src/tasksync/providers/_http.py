"""Shared httpx plumbing for the platform adapters."""

from __future__ import annotations

import asyncio
import base64
import logging
from types import TracebackType
from typing import Any

import httpx

from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import RemoteConfig, ResolvedAuth
from tasksync.contracts.exceptions import (
    TRANSIENT_ERRORS,
    AdapterError,
    AuthError,
    NotFound,
    RateLimited,
    RemoteValidationError,
    Timeout,
)
from tasksync.engine.retry import Sleep, call_with_retries

_LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
# A POST that timed out may still have been applied, so only a throttled POST is resent.
_POST_RETRY_ON: tuple[type[AdapterError], ...] = (RateLimited,)
USER_AGENT = "tasksync"


def authorization_header(auth: ResolvedAuth) -> str:
    method = auth.method.lower()
    if method == "basic":
        if not auth.email:
            raise AuthError(f"auth profile {auth.profile!r} uses basic auth but has no email")
        raw = f"{auth.email}:{auth.token}".encode()
        return f"Basic {base64.b64encode(raw).decode('ascii')}"
    if method in {"bearer", "token", "pat"}:
        return f"Bearer {auth.token}"
    raise AuthError(f"unsupported auth method {auth.method!r} in profile {auth.profile!r}")


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


def _detail(response: httpx.Response) -> str:
    text = response.text.strip()
    if not text:
        return f"HTTP {response.status_code}"
    return f"HTTP {response.status_code}: {text[:500]}"


def raise_for_status(response: httpx.Response) -> None:
    """Translate an error response into the adapter error taxonomy."""
    status = response.status_code
    if status < 400:
        return
    detail = _detail(response)
    if status == 429 or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"):
        raise RateLimited(f"rate limited ({detail})", retry_after=_retry_after(response))
    if status in {401, 403}:
        raise AuthError(f"authentication failed ({detail})")
    if status == 404:
        raise NotFound(f"not found ({detail})")
    if status in {400, 422}:
        raise RemoteValidationError(f"remote rejected the request ({detail})")
    raise AdapterError(f"remote API error ({detail})")


class HttpAdapter(RemoteAdapter):
    """Owns the ``httpx.AsyncClient`` and maps transport failures to adapter errors."""

    def __init__(
        self,
        remote: RemoteConfig,
        auth: ResolvedAuth,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._remote = remote
        self._auth = auth
        self._transport = transport
        self._timeout = timeout
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        raise NotImplementedError  # pragma: no cover

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "Authorization": authorization_header(self._auth),
        }

    async def __aenter__(self) -> HttpAdapter:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one request, retrying it alone on ``RateLimited`` and ``Timeout``."""
        client = self._client
        if client is None:
            raise AdapterError("adapter is not initialized. Use 'async with'.")
        return await call_with_retries(
            lambda: self._send(client, method, url, **kwargs),
            sleep=self._sleep,
            label=f"{method} {url}",
            retry_on=_POST_RETRY_ON if method.upper() == "POST" else TRANSIENT_ERRORS,
        )

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise Timeout(f"{method} {url} timed out") from exc
        except httpx.TransportError as exc:
            raise AdapterError(f"{method} {url} failed: {exc}") from exc

        _LOG.debug("%s %s -> %d", method, url, response.status_code)
        raise_for_status(response)
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise AdapterError(f"{method} {url} returned invalid JSON") from exc
