# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Resilient HTTP helpers for the dashboard API.

Read calls go through :class:`ResilientClient`, an ``httpx.AsyncClient``
wrapper whose methods never raise for network, HTTP or decoding failures.
Every call returns a :class:`FetchOutcome`; callers treat anything that is
not ``ok`` as "no data" for that source. Cancellation is reported with
``kind="cancelled"`` so pages can drop the result without showing an error.

Form submissions from Streamlit are synchronous and use :class:`WriteClient`
(``requests``), which returns the same outcome type.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple

import httpx
import requests

from backoffice.config import get_setting
from backoffice.logs import get_logger
from backoffice.session import SessionContext

log = get_logger(__name__)

__all__ = [
    "CancelToken",
    "FetchOutcome",
    "ResilientClient",
    "WriteClient",
    "build_url",
    "fetch_all",
    "server_message",
]


class CancelToken:
    """Abort signal shared by every request of one page load."""

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: Set[asyncio.Future] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        self._tasks.clear()

    def attach(self, task: asyncio.Future) -> None:
        if self._cancelled:
            task.cancel()
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


@dataclass
class FetchOutcome:
    data: Any = None
    error: Optional[str] = None
    kind: str = "ok"
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind == "ok"

    @property
    def cancelled(self) -> bool:
        return self.kind == "cancelled"

    @classmethod
    def cancelled_outcome(cls) -> "FetchOutcome":
        return cls(kind="cancelled")


def build_url(base_url: str, path: str) -> str:
    base = (base_url or "").rstrip("/")

    if path.startswith("http"):
        return path

    normalized_path = path if path.startswith("/") else f"/{path}"
    if base.endswith("/api") and (normalized_path == "/api" or normalized_path.startswith("/api/")):
        normalized_path = normalized_path[len("/api") :]

    return f"{base}{normalized_path}"


def _clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in sorted((params or {}).items()) if v not in (None, "")}


def _classify_exception(exc: Exception) -> str:
    if isinstance(exc, (httpx.TimeoutException, requests.Timeout)):
        return "timeout"
    if isinstance(exc, (httpx.TransportError, requests.ConnectionError)):
        return "network"
    if isinstance(exc, ValueError):
        return "invalid_json"
    return exc.__class__.__name__.lower()


def _decode_body(content: bytes, text: str) -> Tuple[Any, Optional[str]]:
    if not content:
        return None, None
    try:
        return json.loads(text), None
    except ValueError as exc:
        return None, f"non-JSON response: {exc}"


def server_message(outcome: FetchOutcome, fallback: str) -> str:
    """Return the server supplied error text for a failed write, else ``fallback``."""

    body = outcome.data
    if isinstance(body, Mapping):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


class ResilientClient:
    """Async read client bound to one API base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        session: SessionContext | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.session = session or SessionContext()
        if timeout is None:
            timeout = float(get_setting("api.request_timeout_s", 15))
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=self.session.headers(),
            transport=transport,
        )

    async def __aenter__(self) -> "ResilientClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def url(self, path: str) -> str:
        return build_url(self.base_url, path)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        token: CancelToken | None = None,
    ) -> FetchOutcome:
        if token is not None and token.cancelled:
            log.debug("%s %s skipped; already cancelled", method, path)
            return FetchOutcome.cancelled_outcome()

        url = self.url(path)
        call = asyncio.ensure_future(
            self._client.request(method, url, params=_clean_params(params), json=payload)
        )
        if token is not None:
            token.attach(call)
        try:
            response = await call
        except asyncio.CancelledError:
            if token is not None and token.cancelled:
                log.debug("%s %s cancelled", method, path)
                return FetchOutcome.cancelled_outcome()
            raise
        except Exception as exc:
            kind = _classify_exception(exc)
            log.warning("%s %s failed (%s): %s", method, path, kind, exc)
            return FetchOutcome(error=str(exc) or kind, kind=kind)

        body, decode_error = _decode_body(response.content, response.text)
        status = int(response.status_code)
        if status >= 400:
            detail = response.reason_phrase or "HTTP error"
            log.warning("%s %s failed (%s): %s", method, path, status, detail)
            return FetchOutcome(data=body, error=f"HTTP {status}: {detail}", kind="http_error", status=status)
        if decode_error:
            log.warning("%s %s returned non-JSON content", method, path)
            return FetchOutcome(error=decode_error, kind="invalid_json", status=status)
        return FetchOutcome(data=body, status=status)

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None, *, token: CancelToken | None = None) -> FetchOutcome:
        return await self.request("GET", path, params=params, token=token)

    async def post(self, path: str, payload: Any = None, *, token: CancelToken | None = None) -> FetchOutcome:
        return await self.request("POST", path, payload=payload or {}, token=token)

    async def put(self, path: str, payload: Any = None, *, token: CancelToken | None = None) -> FetchOutcome:
        return await self.request("PUT", path, payload=payload or {}, token=token)

    async def delete(self, path: str, *, token: CancelToken | None = None) -> FetchOutcome:
        return await self.request("DELETE", path, token=token)


async def fetch_all(
    client: ResilientClient,
    calls: Iterable[Tuple[str, str, Optional[Mapping[str, Any]]]],
    *,
    token: CancelToken | None = None,
) -> Dict[str, FetchOutcome]:
    """Fire every ``(name, path, params)`` GET together and join once."""

    plan = list(calls)
    results = await asyncio.gather(
        *(client.get(path, params, token=token) for _, path, params in plan)
    )
    return {name: outcome for (name, _, _), outcome in zip(plan, results)}


class WriteClient:
    """Synchronous client for create/update/delete calls from form handlers."""

    def __init__(
        self,
        base_url: str,
        *,
        session: SessionContext | None = None,
        timeout: float | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.session = session or SessionContext()
        self.timeout = float(timeout if timeout is not None else get_setting("api.request_timeout_s", 15))
        self._http = http or requests.Session()

    def _send(self, method: str, path: str, payload: Any = None) -> FetchOutcome:
        url = build_url(self.base_url, path)
        try:
            response = self._http.request(
                method,
                url,
                json=payload,
                headers=self.session.headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            kind = _classify_exception(exc)
            log.warning("%s %s failed (%s): %s", method, path, kind, exc)
            return FetchOutcome(error=str(exc) or kind, kind=kind)

        body, decode_error = _decode_body(response.content, response.text)
        status = int(response.status_code)
        if not response.ok:
            detail = response.reason or "HTTP error"
            log.warning("%s %s failed (%s): %s", method, path, status, detail)
            return FetchOutcome(data=body, error=f"HTTP {status}: {detail}", kind="http_error", status=status)
        if decode_error:
            # Empty or plain-text bodies are fine for writes.
            body = None
        return FetchOutcome(data=body, status=status)

    def post(self, path: str, payload: Any = None) -> FetchOutcome:
        return self._send("POST", path, payload or {})

    def put(self, path: str, payload: Any = None) -> FetchOutcome:
        return self._send("PUT", path, payload or {})

    def delete(self, path: str) -> FetchOutcome:
        return self._send("DELETE", path)
