# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import requests

from backoffice import endpoints
from backoffice.endpoints import EndpointResolver, build_candidate_bases
from backoffice.http import CancelToken


def test_candidate_order_and_dedup():
    bases = build_candidate_bases(
        "http://cfg.example/api/",
        "http://localhost:5173",
        ports=[4000, 4001],
        hosts=["localhost", "127.0.0.1"],
        default="http://localhost:4000/api",
    )
    assert bases == [
        "http://cfg.example/api",
        "http://localhost:5173/api",
        "http://127.0.0.1:4000/api",
        "http://localhost:4001/api",
        "http://127.0.0.1:4001/api",
        "http://localhost:4000/api",
    ]


def test_candidates_without_origin_still_enumerate_loopback():
    bases = build_candidate_bases(None, None, ports=[4002], hosts=["127.0.0.1"], default="http://fallback/api")
    assert bases == ["http://127.0.0.1:4002/api", "http://fallback/api"]


def test_configured_candidates_prefers_env(monkeypatch):
    monkeypatch.setenv("BACKOFFICE_API_BASE", "http://env.example/api")
    bases = endpoints.configured_candidates()
    assert bases[0] == "http://env.example/api"
    assert bases[-1] == "http://localhost:4000/api"


def test_health_check_uses_health_and_short_timeout(monkeypatch):
    seen = {}

    class _Resp:
        status_code = 204

    def fake_get(url, timeout):
        seen["url"] = url
        seen["timeout"] = timeout
        return _Resp()

    monkeypatch.setattr(endpoints.requests, "get", fake_get)
    assert endpoints.check_health("http://localhost:4000/api") is True
    assert seen == {"url": "http://localhost:4000/api/health", "timeout": 1.5}


def test_health_check_failure_is_false(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(endpoints.requests, "get", boom)
    assert endpoints.check_health("http://localhost:4000/api") is False


def test_resolver_returns_first_healthy_and_memoizes():
    tried = []

    def check(base):
        tried.append(base)
        return base == "b"

    resolver = EndpointResolver(["a", "b", "c"], check=check)
    assert resolver.resolve() == "b"
    assert resolver.resolve() == "b"
    assert tried == ["a", "b"]
    assert resolver.base == "b"


def test_unresolved_keeps_default_and_does_not_retry(caplog, propagating_logs):
    tried = []

    def check(base):
        tried.append(base)
        return False

    resolver = EndpointResolver(["a", "b"], check=check, default="default")
    with caplog.at_level("WARNING", logger="backoffice.endpoints"):
        assert resolver.resolve() is None
    assert resolver.resolve() is None
    assert tried == ["a", "b"]
    assert resolver.resolved is None
    assert resolver.base == "default"
    assert "No API base responded" in caplog.text


def test_reset_rechecks_and_keeps_last_known():
    healthy = {"b"}
    resolver = EndpointResolver(["a", "b"], check=lambda base: base in healthy)
    assert resolver.resolve() == "b"

    healthy.clear()
    resolver.reset()
    assert resolver.resolve() is None
    assert resolver.base == "b"


def test_cancelled_token_stops_resolution():
    token = CancelToken()
    token.cancel()
    resolver = EndpointResolver(["a"], check=lambda base: True)
    assert resolver.resolve(token) is None
    assert resolver.resolve() == "a"


def test_unreachable_api_falls_back_to_configured_default():
    bases = build_candidate_bases()
    assert bases[-1] == "http://localhost:4000/api"
    assert bases.count("http://localhost:4000/api") == 1

    resolver = EndpointResolver(bases, check=lambda base: False)
    assert resolver.resolve() is None
    assert resolver.base == "http://localhost:4000/api"


def test_resolver_default_defaults_to_config():
    assert EndpointResolver(["http://other/api"]).default == "http://localhost:4000/api"
    assert EndpointResolver([]).candidates == ["http://localhost:4000/api"]
