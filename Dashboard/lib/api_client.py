# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import asyncio
import os
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

import streamlit as st

from backoffice import compliance, reports, service_users
from backoffice.endpoints import EndpointResolver, configured_candidates
from backoffice.http import CancelToken, ResilientClient, WriteClient
from backoffice.pagination import FetchPage, Page, PageQuery
from backoffice.reconcile import AdminOverviewLoader, ViewState
from backoffice.session import SessionContext

T = TypeVar("T")

_RESOLVER_KEY = "_api_resolvers"


def get_base_url() -> str:
    """Resolve an explicit API base URL from secrets or environment ("" if unset)."""

    secret_base = None
    try:
        secret_base = st.secrets.get("BACKOFFICE_API_BASE") or st.secrets.get("backoffice_api_base")
    except Exception:
        secret_base = None

    env_base = os.getenv("BACKOFFICE_API_BASE") or os.getenv("backoffice_api_base")
    return (secret_base or env_base or "").rstrip("/")


def get_token() -> str:
    """Resolve the bearer token from secrets or environment."""

    secret_token = None
    try:
        secret_token = st.secrets.get("BACKOFFICE_API_TOKEN") or st.secrets.get("backoffice_api_token")
    except Exception:
        secret_token = None

    env_token = os.getenv("BACKOFFICE_API_TOKEN") or os.getenv("backoffice_api_token")
    return secret_token or env_token or ""


def get_resolver(page: str) -> EndpointResolver:
    """One resolver per page; ``reset_page`` forces a fresh health check on next mount."""

    resolvers: Dict[str, EndpointResolver] = st.session_state.setdefault(_RESOLVER_KEY, {})
    resolver = resolvers.get(page)
    if resolver is None:
        explicit = get_base_url()
        candidates = configured_candidates(os.getenv("BACKOFFICE_PUBLIC_ORIGIN"))
        if explicit and explicit not in candidates:
            candidates.insert(0, explicit)
        resolver = EndpointResolver(candidates)
        resolvers[page] = resolver
    return resolver


def reset_page(page: str) -> None:
    resolvers: Dict[str, EndpointResolver] = st.session_state.get(_RESOLVER_KEY, {})
    resolver = resolvers.get(page)
    if resolver is not None:
        resolver.reset()


def resolve_base(page: str) -> str:
    resolver = get_resolver(page)
    resolver.resolve()
    return resolver.base


def get_session(page: str) -> SessionContext:
    return SessionContext(
        base_url=resolve_base(page),
        token=get_token(),
        user=dict(st.session_state.get("user") or {}),
    )


def run(coro: Awaitable[T]) -> T:
    """Run a coroutine from a Streamlit script run."""

    return asyncio.run(coro)  # type: ignore[arg-type]


def load_overview(page: str, previous: ViewState | None = None) -> ViewState:
    session = get_session(page)

    async def _load() -> Optional[ViewState]:
        async with ResilientClient(session.base_url, session=session) as client:
            loader = AdminOverviewLoader(client)
            if previous is not None:
                loader.state = previous
            return await loader.load()

    return run(_load()) or previous or ViewState()


def report_fetch(page: str, kind: str) -> FetchPage:
    session = get_session(page)

    async def _fetch(query: PageQuery, token: CancelToken) -> Optional[Page]:
        async with ResilientClient(session.base_url, session=session) as client:
            return await reports.report_fetcher(client, kind)(query, token)

    return _fetch


def load_compliance(
    page: str,
    *,
    search: str,
    status: str,
    property_filter: Any,
    previous: compliance.CompliancePage | None = None,
) -> compliance.CompliancePage:
    session = get_session(page)

    async def _load() -> Optional[compliance.CompliancePage]:
        async with ResilientClient(session.base_url, session=session) as client:
            return await compliance.load_compliance_page(
                client,
                search=search,
                status=status,
                property_filter=property_filter,
                previous=previous,
            )

    return run(_load()) or previous or compliance.CompliancePage()


def get_writer(page: str) -> WriteClient:
    session = get_session(page)
    return WriteClient(session.base_url, session=session)


def load_service_users(page: str) -> List[Dict[str, Any]]:
    session = get_session(page)

    async def _load() -> Optional[List[Dict[str, Any]]]:
        async with ResilientClient(session.base_url, session=session) as client:
            return await service_users.fetch_service_users(client)

    return run(_load()) or []
