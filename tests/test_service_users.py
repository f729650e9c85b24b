# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import asyncio
from datetime import date

import httpx

from backoffice.http import CancelToken
from backoffice.service_users import fetch_service_users, profile_row, roster_stats

TODAY = date(2025, 3, 10)


def test_profile_row_fills_display_fields():
    row = profile_row({"first_name": "Ada", "last_name": "Lovelace", "dob": "1990-03-11", "hotel_name": "Harbour"}, TODAY)
    assert row["name"] == "Ada Lovelace"
    assert row["age"] == "34"
    assert row["property"] == "Harbour"
    assert row["status"] == "N/A"

    bare = profile_row({"id": 3}, TODAY)
    assert bare["name"] == "Service User"
    assert bare["age"] == "Not specified"
    assert bare["property"] == "Not assigned"


def test_roster_stats():
    rows = [{"status": "Active"}, {"status": "Active"}, {"status": "Moved Out"}, {}]
    assert roster_stats(rows) == {"total": 4, "active": 2, "moved_out": 1}


def test_fetch_service_users_reads_either_envelope(make_client, json_routes):
    async def scenario(body):
        async with make_client(json_routes({"/api/su/users": body})) as client:
            return await fetch_service_users(client, today=TODAY)

    users = asyncio.run(scenario({"users": [{"first_name": "Sam", "date_of_birth": "2000-01-01"}]}))
    assert [(row["name"], row["age"]) for row in users] == [("Sam", "25")]
    assert len(asyncio.run(scenario({"data": [{"id": 1}, "junk"]}))) == 1
    assert asyncio.run(scenario({"users": "nope"})) == []


def test_fetch_service_users_failure_and_cancel(make_client, json_routes):
    async def failing():
        async with make_client(json_routes({"/api/su/users": httpx.Response(500)})) as client:
            return await fetch_service_users(client)

    assert asyncio.run(failing()) == []

    token = CancelToken()
    token.cancel()

    async def cancelled():
        async with make_client(json_routes({})) as client:
            return await fetch_service_users(client, token=token)

    assert asyncio.run(cancelled()) is None
