# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import pytest

from backoffice import adapters
from backoffice.http import FetchOutcome


def test_body_of_only_returns_successful_payloads():
    assert adapters.body_of(FetchOutcome(data={"a": 1})) == {"a": 1}
    assert adapters.body_of(FetchOutcome(data={"a": 1}, kind="http_error")) is None
    assert adapters.body_of(FetchOutcome.cancelled_outcome()) is None
    assert adapters.body_of("raw") is None


@pytest.mark.parametrize(
    "body, expected",
    [
        ([], 0),
        ([1, 2], 2),
        ({"data": [1]}, 1),
        ({"users": [1, 2, 3]}, 3),
        ({"count": "4"}, 4),
        ({"count": 2.0}, 2),
        ({"something": "else"}, 0),
        ("text", None),
        (None, None),
    ],
)
def test_collection_count(body, expected):
    assert adapters.collection_count(body, ("users", "data")) == expected


def test_normalize_hotels_shapes():
    assert adapters.normalize_hotels([{"hotel_id": 3, "hotel_name": "Lake"}, {"name": "no id"}, "x"]) == [
        {"id": 3, "name": "Lake"}
    ]
    assert adapters.normalize_hotels({"rows": [{"_id": "a", "title": "Inn"}]}) == [{"id": "a", "name": "Inn"}]
    assert adapters.normalize_hotels({"h1": {"id": 5, "name": "Keyed"}}) == [{"id": 5, "name": "Keyed"}]
    assert adapters.normalize_hotels(None) == []


def test_compliance_stats():
    body = {"ok": True, "data": {"valid_count": "3", "expiring_count": None, "expired_count": "x"}}
    assert adapters.compliance_stats(body) == {"valid_count": 3, "expiring_count": 0, "expired_count": 0}
    assert adapters.compliance_stats({"valid_count": 3}) is None


def test_kpi_patch_keeps_known_fields():
    assert adapters.kpi_patch({"current": 1, "extra": 2}) == {"current": 1}
    assert adapters.kpi_patch({"extra": 2}) is None
    assert adapters.kpi_patch("x") is None
