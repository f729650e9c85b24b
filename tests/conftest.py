# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

import httpx
import pytest

from backoffice import config
from backoffice.http import ResilientClient

BASE = "http://api.test/api"


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    monkeypatch.delenv("BACKOFFICE_CONFIG_PATH", raising=False)
    monkeypatch.delenv("BACKOFFICE_API_BASE", raising=False)
    config.load.cache_clear()
    yield
    config.load.cache_clear()


def _json_routes(routes: Dict[str, Any]) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering ``routes[path]``; a ``httpx.Response`` value is returned as-is."""

    def handler(request: httpx.Request) -> httpx.Response:
        value = routes.get(request.url.path)
        if value is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(value, httpx.Response):
            return value
        return httpx.Response(200, json=value)

    return handler


@pytest.fixture
def json_routes():
    return _json_routes


@pytest.fixture
def make_client():
    def _make(handler, session=None) -> ResilientClient:
        return ResilientClient(BASE, session=session, transport=httpx.MockTransport(handler), timeout=5)

    return _make


@pytest.fixture
def propagating_logs(monkeypatch):
    """Let ``caplog`` see records from the package loggers (they do not propagate)."""

    for name in list(logging.root.manager.loggerDict):
        if name.startswith("backoffice"):
            monkeypatch.setattr(logging.getLogger(name), "propagate", True)
