# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Admin overview reconciliation.

The admin dashboard is fed by one combined ``/api/admin/overview`` endpoint,
three single-purpose endpoints that override individual panels, and four raw
collections used only to derive KPI counts. All eight requests are fired
together and joined once; :func:`reconcile` then merges the settled outcomes
in a fixed order, so the result never depends on which response arrived
first:

1. overview sections are applied;
2. single-purpose sources overwrite their panel unconditionally;
3. the attendance summary stands in for the attendance distribution when
   nothing else supplied one;
4. KPIs the overview did not supply fall back to raw collection counts;
5. anything still unsupplied keeps its previous (or default) value.

Specific sources win even when the overview value might be fresher. Do not
change that ordering without product sign-off.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from backoffice import adapters
from backoffice.endpoints import EndpointResolver
from backoffice.http import CancelToken, FetchOutcome, ResilientClient, fetch_all
from backoffice.logs import get_logger

log = get_logger(__name__)

OVERVIEW = "overview"
EMPLOYEE_STATUS = "employee_status"
ATTENDANCE_DISTRIBUTION = "attendance_distribution"
CLOCKIN = "clockin"
HOTELS = "hotels"
STAFF = "staff"
TASKS = "tasks"
ATTENDANCE_SUMMARY = "attendance_summary"


@dataclass(frozen=True)
class Source:
    name: str
    path: str


# Request order; merge order is fixed separately in ``reconcile``.
OVERVIEW_SOURCES: Tuple[Source, ...] = (
    Source(OVERVIEW, "/api/admin/overview"),
    Source(EMPLOYEE_STATUS, "/api/admin/employee-status"),
    Source(ATTENDANCE_DISTRIBUTION, "/api/admin/attendance-distribution"),
    Source(CLOCKIN, "/api/admin/clockin"),
    Source(HOTELS, "/api/hotels"),
    Source(STAFF, "/api/staff"),
    Source(TASKS, "/api/tasks"),
    Source(ATTENDANCE_SUMMARY, "/api/attendance/summary"),
)


@dataclass(frozen=True)
class KPI:
    current: Any
    target: Any
    delta: Optional[str] = None
    up: bool = True

    def merged(self, patch: Optional[Mapping[str, Any]]) -> "KPI":
        if not patch:
            return self
        return replace(self, **{key: patch[key] for key in adapters.KPI_FIELDS if key in patch})

    @property
    def display(self) -> str:
        return f"{self.current}/{self.target}"


DEFAULT_KPIS: Dict[str, KPI] = {
    "attendance_kpi": KPI(current=120, target=154, delta="+2.1%", up=True),
    "hotels_kpi": KPI(current=90, target=125, delta="-2.1%", up=False),
    "staff_kpi": KPI(current=69, target=86, delta="-11.2%", up=False),
    "tasks_kpi": KPI(current=225, target=28, delta="+11.2%", up=True),
}

# overview key -> ViewState attribute
KPI_SECTIONS: Tuple[Tuple[str, str], ...] = (
    ("attendance", "attendance_kpi"),
    ("hotels", "hotels_kpi"),
    ("staff", "staff_kpi"),
    ("tasks", "tasks_kpi"),
)
PANEL_SECTIONS: Tuple[Tuple[str, str], ...] = (
    ("employeeStatus", "employee_status"),
    ("attendanceDistribution", "attendance_distribution"),
    ("clock", "clock_data"),
)
# single-purpose source -> ViewState attribute, in overwrite order
SPECIFIC_SOURCES: Tuple[Tuple[str, str], ...] = (
    (EMPLOYEE_STATUS, "employee_status"),
    (ATTENDANCE_DISTRIBUTION, "attendance_distribution"),
    (CLOCKIN, "clock_data"),
)
# raw collection source -> (ViewState attribute, list keys)
COUNT_FALLBACKS: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    (HOTELS, "hotels_kpi", ("hotels", "data")),
    (STAFF, "staff_kpi", ("users", "data")),
    (TASKS, "tasks_kpi", ("tasks", "data")),
)


@dataclass(frozen=True)
class ViewState:
    attendance_kpi: KPI = field(default_factory=lambda: DEFAULT_KPIS["attendance_kpi"])
    hotels_kpi: KPI = field(default_factory=lambda: DEFAULT_KPIS["hotels_kpi"])
    staff_kpi: KPI = field(default_factory=lambda: DEFAULT_KPIS["staff_kpi"])
    tasks_kpi: KPI = field(default_factory=lambda: DEFAULT_KPIS["tasks_kpi"])
    employee_status: Optional[Any] = None
    attendance_distribution: Optional[Any] = None
    clock_data: Optional[Any] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "attendanceKPI": asdict(self.attendance_kpi),
            "hotelsKPI": asdict(self.hotels_kpi),
            "staffKPI": asdict(self.staff_kpi),
            "tasksKPI": asdict(self.tasks_kpi),
            "employeeStatus": self.employee_status,
            "attendanceDistribution": self.attendance_distribution,
            "clockData": self.clock_data,
        }


def reconcile(
    outcomes: Mapping[str, Any],
    previous: ViewState | None = None,
) -> ViewState:
    """Merge settled source outcomes into a new :class:`ViewState`.

    ``outcomes`` maps source names to :class:`FetchOutcome` objects. Missing
    names, failed outcomes and bodies of the wrong shape all count as absent.
    """

    base = previous or ViewState()
    updates: Dict[str, Any] = {}
    overview = adapters.as_mapping(adapters.body_of(outcomes.get(OVERVIEW)))

    overview_kpis: set[str] = set()
    if overview is not None:
        for key, attr in KPI_SECTIONS:
            patch = adapters.kpi_patch(adapters.section(overview, key))
            if patch:
                updates[attr] = getattr(base, attr).merged(patch)
                overview_kpis.add(attr)
        for key, attr in PANEL_SECTIONS:
            value = adapters.non_empty(overview.get(key))
            if value is not None:
                updates[attr] = value

    for name, attr in SPECIFIC_SOURCES:
        value = adapters.non_empty(adapters.body_of(outcomes.get(name)))
        if value is not None:
            updates[attr] = value

    summary_body = adapters.body_of(outcomes.get(ATTENDANCE_SUMMARY))
    if "attendance_distribution" not in updates:
        value = adapters.non_empty(summary_body)
        if value is not None:
            updates["attendance_distribution"] = value

    for name, attr, keys in COUNT_FALLBACKS:
        if attr in overview_kpis:
            continue
        count = adapters.collection_count(adapters.body_of(outcomes.get(name)), keys)
        if count is not None:
            updates[attr] = getattr(base, attr).merged({"current": count})

    if "attendance_kpi" not in overview_kpis:
        patch = adapters.attendance_summary_kpi(summary_body)
        if patch:
            updates["attendance_kpi"] = base.attendance_kpi.merged(patch)

    return replace(base, **updates)


class AdminOverviewLoader:
    """Owns the admin overview state for one mounted dashboard view.

    ``load`` runs one bootstrap cycle. A newer cycle cancels the previous one
    and :meth:`close` cancels whatever is in flight; in both cases the stale
    cycle returns ``None`` and leaves :attr:`state` untouched.
    """

    def __init__(
        self,
        client: ResilientClient,
        *,
        resolver: EndpointResolver | None = None,
        on_update: Callable[[ViewState], None] | None = None,
        sources: Tuple[Source, ...] = OVERVIEW_SOURCES,
    ) -> None:
        self.client = client
        self.resolver = resolver
        self.on_update = on_update
        self.sources = sources
        self.state = ViewState()
        self.loading = False
        self._cycle = 0
        self._token: CancelToken | None = None

    async def load(self) -> Optional[ViewState]:
        if self._token is not None:
            self._token.cancel()
        self._cycle += 1
        cycle = self._cycle
        token = CancelToken()
        self._token = token
        self.loading = True

        try:
            if self.resolver is not None:
                await asyncio.to_thread(self.resolver.resolve, token)
                self.client.base_url = self.resolver.base
            outcomes: Dict[str, FetchOutcome] = await fetch_all(
                self.client,
                [(source.name, source.path, None) for source in self.sources],
                token=token,
            )
            if token.cancelled or cycle != self._cycle:
                log.debug("Dropping admin overview cycle %d", cycle)
                return None
            self.state = reconcile(outcomes, self.state)
            failed = sorted(name for name, outcome in outcomes.items() if not outcome.ok)
            if failed:
                log.info("Admin overview loaded without: %s", ", ".join(failed))
            if self.on_update is not None:
                self.on_update(self.state)
            return self.state
        finally:
            if cycle == self._cycle:
                self.loading = False

    def close(self) -> None:
        if self._token is not None:
            self._token.cancel()
