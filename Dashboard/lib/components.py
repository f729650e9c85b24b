# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from typing import Any, List, Tuple

import pandas as pd
import streamlit as st

from backoffice.pagination import PaginatedListController
from backoffice.reconcile import KPI


def render_navigation_links(use_container: bool = False) -> None:
    links: List[Tuple[str, str, str]] = [
        ("pages/00_Admin_Overview.py", "Admin Overview", "📊"),
        ("pages/01_Compliance.py", "Compliance", "📜"),
        ("pages/02_Attendance_Report.py", "Attendance Report", "🕘"),
        ("pages/03_Leave_Report.py", "Leave Report", "🌴"),
        ("pages/04_Task_Report.py", "Task Report", "✅"),
        ("pages/05_Service_Users.py", "Service Users", "🧑"),
    ]

    container = st.container() if use_container else st
    if hasattr(container, "page_link"):
        for page, label, icon in links:
            container.page_link(page, label=label, icon=icon)
    else:  # pragma: no cover - Streamlit fallback
        bullets = "\n".join(f"- {icon} [{label}]({page})" for page, label, icon in links)
        container.markdown(bullets)


def render_kpi(title: str, kpi: KPI, cta: str = "View All") -> None:
    delta = None
    if kpi.delta:
        delta = kpi.delta if kpi.up else f"-{str(kpi.delta).lstrip('+-')}"
    st.metric(title, kpi.display, delta=delta, help=cta)


def render_stat(title: str, value: Any) -> None:
    st.metric(title, value if value is not None else 0)


def render_records_table(title: str | None, records: Any, *, key: str | None = None) -> None:
    if title:
        st.markdown(f"### {title}")
    df = records_to_dataframe(records)
    if df is None or df.empty:
        st.info("No data available for this section.")
        return

    st.dataframe(df, use_container_width=True, hide_index=True, key=key)


def records_to_dataframe(records: Any) -> pd.DataFrame | None:
    if records is None:
        return None
    if isinstance(records, list):
        if not records:
            return None
        return pd.DataFrame.from_records(records)
    if isinstance(records, dict):
        if all(isinstance(v, (list, tuple, dict)) for v in records.values()):
            return pd.DataFrame.from_dict(records, orient="index").reset_index(names=["key"])
        return pd.DataFrame(records.items(), columns=["key", "value"])
    return pd.DataFrame([{"value": records}])


def render_report_table(
    controller: PaginatedListController, columns: List[str], *, key: str, loading: bool = False
) -> None:
    """Table shell stays on screen; skeleton rows stand in while loading."""

    if loading or controller.loading:
        rows = controller.placeholder_rows(columns)
    else:
        rows = [{column: row.get(column, "") for column in columns} for row in controller.rows]
    if not rows:
        st.dataframe(pd.DataFrame(columns=columns), use_container_width=True, hide_index=True, key=key)
        st.caption("No records found.")
        return
    st.dataframe(pd.DataFrame.from_records(rows, columns=columns), use_container_width=True, hide_index=True, key=key)


def render_pager(controller: PaginatedListController, *, key: str) -> str | None:
    """Render Prev/Next; returns "prev", "next" or None."""

    start, end, total = controller.showing()
    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        st.caption(f"Showing {start} - {end} of {total}")
    with col2:
        if st.button("Prev", key=f"{key}_prev", disabled=not controller.has_prev()):
            return "prev"
    with col3:
        if st.button("Next", key=f"{key}_next", disabled=not controller.has_next()):
            return "next"
    return None


def render_error(message: str, exc: Exception | None = None) -> None:
    if exc:
        st.error(f"{message}: {exc}")
    else:
        st.error(message)
