# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""API base discovery.

The dashboard may be served behind a same-origin proxy, from a dev server on
one of a few local ports, or against an explicitly configured backend. The
resolver walks the candidates once per page mount and remembers the first
one whose ``/health`` answers. Resolution is best effort: when nothing
answers, callers keep using :attr:`EndpointResolver.base`.
"""

from __future__ import annotations

import os
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

import requests

from backoffice.config import get_setting
from backoffice.http import CancelToken, build_url
from backoffice.logs import get_logger

log = get_logger(__name__)

DEFAULT_BASE = "http://localhost:4000/api"
DEFAULT_PORTS: Sequence[int] = (4000, 4001, 4002)
DEFAULT_HOSTS: Sequence[str] = ("localhost", "127.0.0.1")


def _default_base(default: Optional[str] = None) -> str:
    return (default or get_setting("api.default_base", DEFAULT_BASE) or DEFAULT_BASE).rstrip("/")


def build_candidate_bases(
    explicit: Optional[str] = None,
    origin: Optional[str] = None,
    *,
    ports: Optional[Iterable[int]] = None,
    hosts: Optional[Iterable[str]] = None,
    default: Optional[str] = None,
) -> List[str]:
    """Return the ordered, de-duplicated list of API bases to try.

    Order: explicit configuration, same-origin ``/api``, every loopback host
    and the origin's own hostname on each dev port, then the fixed default.
    """

    ports = list(ports if ports is not None else get_setting("api.ports", DEFAULT_PORTS))
    hosts = list(hosts if hosts is not None else get_setting("api.hosts", DEFAULT_HOSTS))
    default = _default_base(default)

    candidates: List[str] = []
    if explicit:
        candidates.append(explicit.rstrip("/"))

    protocol, hostname = "http", ""
    if origin:
        parts = urlsplit(origin)
        protocol = parts.scheme or "http"
        hostname = parts.hostname or ""
        candidates.append(f"{origin.rstrip('/')}/api")
    for port in ports:
        for host in [*hosts, hostname]:
            base = f"{protocol}://{host}:{port}/api"
            # the default is always tried last
            if host and base != default:
                candidates.append(base)

    candidates.append(default)

    seen: set[str] = set()
    ordered: List[str] = []
    for base in candidates:
        if base not in seen:
            seen.add(base)
            ordered.append(base)
    return ordered


def configured_candidates(origin: Optional[str] = None) -> List[str]:
    explicit = os.getenv("BACKOFFICE_API_BASE") or get_setting("api.base_url", "")
    return build_candidate_bases(explicit or None, origin)


def check_health(base: str, *, timeout: float | None = None) -> bool:
    """Return True when ``{base}/health`` answers with a 2xx status."""

    if timeout is None:
        timeout = float(get_setting("api.health_timeout_s", 1.5))
    url = build_url(base, "/health")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        log.debug("Health check %s failed: %s", url, exc)
        return False
    return 200 <= response.status_code < 300


class EndpointResolver:
    """Memoizing resolver for one page view."""

    def __init__(
        self,
        candidates: Sequence[str],
        *,
        check: Callable[[str], bool] = check_health,
        default: Optional[str] = None,
    ) -> None:
        self.default = _default_base(default)
        self.candidates = list(candidates) or [self.default]
        self._check = check
        self._resolved: Optional[str] = None
        self._last_known: Optional[str] = None
        self._attempted = False

    @property
    def resolved(self) -> Optional[str]:
        return self._resolved

    @property
    def base(self) -> str:
        return self._resolved or self._last_known or self.default

    def resolve(self, token: CancelToken | None = None) -> Optional[str]:
        if self._attempted:
            return self._resolved
        for base in self.candidates:
            if token is not None and token.cancelled:
                return None
            if self._check(base):
                if token is not None and token.cancelled:
                    return None
                self._resolved = base
                self._last_known = base
                self._attempted = True
                log.info("API base resolved to %s", base)
                return base
        self._attempted = True
        log.warning("No API base responded to /health; tried %d candidates", len(self.candidates))
        return None

    def reset(self) -> None:
        if self._resolved is not None:
            self._last_known = self._resolved
        self._resolved = None
        self._attempted = False
