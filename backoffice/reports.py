# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Paginated admin reports (attendance, leaves, tasks)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from backoffice import adapters
from backoffice.http import CancelToken, ResilientClient
from backoffice.logs import get_logger
from backoffice.pagination import FetchPage, Page, PageQuery

log = get_logger(__name__)

REPORT_KINDS = ("attendance", "leaves", "tasks")

# report kind -> list keys tried in order
ROW_KEYS: Dict[str, Sequence[str]] = {
    "attendance": ("attendance",),
    "leaves": ("leaves",),
    "tasks": ("tasks", "rows"),
}

MONTHLY_COLUMNS: Dict[str, Sequence[str]] = {
    "attendance": ("present", "absent", "late", "leave"),
    "leaves": ("annual", "casual", "medical", "others"),
    "tasks": ("completed", "inprogress", "pending"),
}


@dataclass
class ReportPage:
    kind: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    monthly: List[Dict[str, Any]] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    breakdown: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _task_metrics(body: Dict[str, Any]) -> Dict[str, int]:
    metrics = adapters.as_mapping(body.get("metrics")) or {}
    total = metrics.get("total")
    if total is None:
        total = body.get("total") or 0
    return {
        "total": _to_int(total),
        "completed": _to_int(metrics.get("completed")),
        "inprogress": _to_int(metrics.get("inprogress")),
        "pending": _to_int(metrics.get("pending")),
    }


def _task_breakdown(body: Dict[str, Any]) -> List[Dict[str, Any]]:
    entries = adapters.as_collection(body, ("breakdown", "byStatus")) or []
    breakdown: List[Dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name") or entry.get("status") or entry.get("label") or "Unknown"
        value = entry.get("value")
        if value is None:
            value = entry.get("count")
        if value is None:
            value = entry.get("total")
        breakdown.append({"name": name, "value": _to_int(value)})
    return breakdown


def _first(row: Dict[str, Any], keys: Sequence[str], default: Any = "") -> Any:
    for key in keys:
        if row.get(key):
            return row[key]
    return default


def task_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Task rows arrive with several field spellings; add the canonical ones."""

    return {
        **row,
        "id": _first(row, ("id", "task_id"), None),
        "task_name": _first(row, ("name", "task_name"), "Untitled"),
        "project_name": _first(row, ("project_name", "project"), "-"),
        "created_date": _first(row, ("created_at", "created_date", "created_on")),
        "due_date": _first(row, ("due_date", "due")),
    }


def parse_report(kind: str, body: Any) -> Optional[ReportPage]:
    """Adapt a report payload; None when the body is not a mapping."""

    mapping = adapters.as_mapping(body)
    if mapping is None:
        return None
    rows = adapters.as_collection(mapping, ROW_KEYS[kind]) or []
    rows = [dict(row) for row in rows if isinstance(row, dict)]
    monthly = [dict(m) for m in (adapters.as_collection(mapping, ("monthly",)) or []) if isinstance(m, dict)]

    if kind == "tasks":
        rows = [task_row(row) for row in rows]
        metrics: Dict[str, Any] = _task_metrics(mapping)
        total = mapping.get("total")
        if total is None:
            total = (adapters.as_mapping(mapping.get("metrics")) or {}).get("total")
        if total is None:
            total = len(rows)
        return ReportPage(
            kind=kind,
            metrics=metrics,
            monthly=monthly,
            rows=rows,
            total=_to_int(total),
            breakdown=_task_breakdown(mapping),
        )

    return ReportPage(
        kind=kind,
        metrics=adapters.as_mapping(mapping.get("metrics")) or {},
        monthly=monthly,
        rows=rows,
        total=_to_int(mapping.get("total")),
    )


async def fetch_report(
    client: ResilientClient,
    kind: str,
    query: PageQuery,
    token: CancelToken | None = None,
) -> Optional[ReportPage]:
    """GET ``/api/admin/reports/{kind}``.

    Returns None when the request was cancelled; an empty page (with
    ``error`` set) for any other failure.
    """

    if kind not in REPORT_KINDS:
        raise ValueError(f"Unknown report kind: {kind!r}")
    outcome = await client.get(f"/api/admin/reports/{kind}", query.params(), token=token)
    if outcome.cancelled:
        return None
    if not outcome.ok:
        return ReportPage(kind=kind, error=outcome.error or f"Failed to load {kind}")
    page = parse_report(kind, outcome.data)
    if page is None:
        log.warning("Unexpected %s report payload: %s", kind, type(outcome.data).__name__)
        return ReportPage(kind=kind)
    return page


def report_fetcher(client: ResilientClient, kind: str) -> FetchPage:
    """Adapt :func:`fetch_report` to the paginated controller's fetch signature."""

    async def _fetch(query: PageQuery, token: CancelToken) -> Optional[Page]:
        report = await fetch_report(client, kind, query, token)
        if report is None:
            return None
        return Page(rows=report.rows, total=report.total, extra=report)

    return _fetch


def chart_frame(monthly: List[Dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    """Monthly chart data indexed by month name."""

    records = [
        {"name": entry.get("month") or entry.get("name") or "", **{col: entry.get(col, 0) or 0 for col in columns}}
        for entry in monthly or []
    ]
    if not records:
        return pd.DataFrame(columns=["name", *columns]).set_index("name")
    return pd.DataFrame.from_records(records).set_index("name")
