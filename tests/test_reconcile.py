# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import asyncio
import itertools

import httpx
import pytest

from backoffice import reconcile as rc
from backoffice.http import FetchOutcome
from backoffice.reconcile import DEFAULT_KPIS, KPI, AdminOverviewLoader, ViewState, reconcile


def ok(data):
    return FetchOutcome(data=data, status=200)


def failed():
    return FetchOutcome(error="down", kind="network")


def test_defaults_when_everything_fails():
    state = reconcile({name: failed() for name in (rc.OVERVIEW, rc.HOTELS, rc.STAFF, rc.TASKS)})
    assert state == ViewState()
    assert state.tasks_kpi.current == 225
    assert state.as_dict()["hotelsKPI"] == {"current": 90, "target": 125, "delta": "-2.1%", "up": False}


def test_overview_sections_merge_into_defaults():
    state = reconcile(
        {
            rc.OVERVIEW: ok(
                {
                    "attendance": {"current": 130},
                    "hotels": {"current": 7, "target": 9, "delta": "+1%", "up": True},
                    "employeeStatus": {"fulltime": 10},
                    "attendanceDistribution": [],
                }
            )
        }
    )
    assert state.attendance_kpi == KPI(130, 154, "+2.1%", True)
    assert state.hotels_kpi.display == "7/9"
    assert state.employee_status == {"fulltime": 10}
    assert state.attendance_distribution is None


def test_specific_source_overrides_overview():
    state = reconcile(
        {
            rc.OVERVIEW: ok({"employeeStatus": {"total": 1}, "clock": {"checkIns": [1]}}),
            rc.EMPLOYEE_STATUS: ok({"total": 99}),
            rc.CLOCKIN: ok({}),
        }
    )
    assert state.employee_status == {"total": 99}
    # empty specific payload counts as absent
    assert state.clock_data == {"checkIns": [1]}


@pytest.mark.parametrize(
    "body",
    ["oops", None, 42, ["not", "a", "mapping"], {"hotels": "nope"}, {"hotels": {}}],
)
def test_malformed_overview_is_absent(body):
    state = reconcile({rc.OVERVIEW: ok(body), rc.HOTELS: ok([{"id": 1}, {"id": 2}])})
    assert state.hotels_kpi.current == 2
    assert state.hotels_kpi.target == 125


@pytest.mark.parametrize("body", ["text", 3.5, True, None])
def test_malformed_fallback_sources_keep_previous(body):
    state = reconcile({rc.HOTELS: ok(body), rc.STAFF: ok(body), rc.ATTENDANCE_SUMMARY: ok(body)})
    assert state == ViewState()


def test_count_fallback_shapes():
    state = reconcile(
        {
            rc.HOTELS: ok([]),
            rc.STAFF: ok({"users": [1, 2, 3]}),
            rc.TASKS: ok({"count": 17}),
        }
    )
    assert state.hotels_kpi.current == 0
    assert state.staff_kpi.current == 3
    assert state.tasks_kpi.current == 17
    assert state.staff_kpi.target == 86


def test_overview_kpi_is_not_overwritten_by_count():
    state = reconcile({rc.OVERVIEW: ok({"tasks": {"current": 4}}), rc.TASKS: ok([1, 2, 3])})
    assert state.tasks_kpi.current == 4


def test_attendance_summary_fills_kpi_and_distribution():
    summary = {"current": 88, "target": 0, "delta": "+5%", "up": False, "present": 88}
    state = reconcile({rc.ATTENDANCE_SUMMARY: ok(summary)})
    assert state.attendance_kpi.current == 88
    assert state.attendance_kpi.target == 154
    assert state.attendance_kpi.up is False
    assert state.attendance_distribution == summary


def test_attendance_summary_replaces_last_cycle_distribution():
    previous = ViewState(attendance_distribution=[{"name": "Present", "value": 1}])
    state = reconcile({rc.ATTENDANCE_SUMMARY: ok({"present": 3})}, previous)
    assert state.attendance_distribution == {"present": 3}

    state = reconcile(
        {rc.ATTENDANCE_DISTRIBUTION: ok([{"name": "Late", "value": 2}]), rc.ATTENDANCE_SUMMARY: ok({"present": 3})}
    )
    assert state.attendance_distribution == [{"name": "Late", "value": 2}]


def test_end_to_end_overview_with_partial_fallbacks():
    state = reconcile(
        {
            rc.OVERVIEW: ok({"hotels": {"current": 5}}),
            rc.STAFF: ok([{"id": i} for i in range(12)]),
            rc.TASKS: failed(),
        }
    )
    assert state.hotels_kpi.current == 5
    assert state.staff_kpi.current == 12
    assert state.tasks_kpi == DEFAULT_KPIS["tasks_kpi"]


def _overview_routes():
    return {
        "/api/admin/overview": {"employeeStatus": {"source": "overview"}, "hotels": {"current": 5}},
        "/api/admin/employee-status": {"source": "specific"},
        "/api/staff": [1, 2, 3],
    }


@pytest.mark.parametrize("delays", list(itertools.permutations([0.0, 0.01, 0.02])))
def test_precedence_is_independent_of_arrival_order(make_client, delays):
    routes = _overview_routes()
    timing = dict(zip(routes, delays))

    async def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        await asyncio.sleep(timing.get(path, 0.0))
        if path not in routes:
            return httpx.Response(503)
        return httpx.Response(200, json=routes[path])

    async def scenario():
        async with make_client(handler) as client:
            return await AdminOverviewLoader(client).load()

    state = asyncio.run(scenario())
    assert state.employee_status == {"source": "specific"}
    assert state.hotels_kpi.current == 5
    assert state.staff_kpi.current == 3


def test_loader_close_drops_in_flight_cycle(make_client):
    updates = []

    async def scenario():
        release = asyncio.Event()
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, json={"hotels": {"current": 1}})

        async with make_client(handler) as client:
            loader = AdminOverviewLoader(client, on_update=updates.append)
            pending = asyncio.ensure_future(loader.load())
            await started.wait()
            loader.close()
            release.set()
            result = await pending
            return loader, result

    loader, result = asyncio.run(scenario())
    assert result is None
    assert loader.state == ViewState()
    assert loader.loading is False
    assert updates == []


def test_newer_cycle_supersedes_older(make_client):
    async def scenario():
        calls = {"n": 0}
        first_started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/admin/overview":
                calls["n"] += 1
                if calls["n"] == 1:
                    first_started.set()
                    await asyncio.sleep(5)
                    return httpx.Response(200, json={"hotels": {"current": 111}})
                return httpx.Response(200, json={"hotels": {"current": 2}})
            return httpx.Response(404)

        async with make_client(handler) as client:
            loader = AdminOverviewLoader(client)
            first = asyncio.ensure_future(loader.load())
            await first_started.wait()
            second = await loader.load()
            return await first, second, loader.state

    first, second, state = asyncio.run(scenario())
    assert first is None
    assert second.hotels_kpi.current == 2
    assert state.hotels_kpi.current == 2


def test_loader_uses_resolved_base(make_client, json_routes):
    class _Resolver:
        base = "http://api.test/api"

        def resolve(self, token=None):
            return self.base

    async def scenario():
        async with make_client(json_routes({"/api/hotels": [1]})) as client:
            client.base_url = "http://stale.invalid/api"
            loader = AdminOverviewLoader(client, resolver=_Resolver())
            state = await loader.load()
            return client.base_url, state

    base, state = asyncio.run(scenario())
    assert base == "http://api.test/api"
    assert state.hotels_kpi.current == 1


def test_summary_distribution_refreshes_every_cycle(make_client):
    summaries = iter([{"present": 1}, {"present": 2}])

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/attendance/summary":
            return httpx.Response(200, json=next(summaries))
        return httpx.Response(404)

    async def scenario():
        async with make_client(handler) as client:
            loader = AdminOverviewLoader(client)
            first = await loader.load()
            second = await loader.load()
            return first, second

    first, second = asyncio.run(scenario())
    assert first.attendance_distribution == {"present": 1}
    assert second.attendance_distribution == {"present": 2}
