# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Shared layout for the paginated report pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import streamlit as st

from backoffice.config import get_setting
from backoffice.pagination import PaginatedListController
from backoffice.reports import MONTHLY_COLUMNS, ReportPage, chart_frame
from Dashboard.lib import api_client, components, state


@dataclass
class ReportLayout:
    kind: str
    title: str
    columns: List[str]
    # filter key -> (label, options); "" means no filter
    selects: Dict[str, Tuple[str, Sequence[str]]] = field(default_factory=dict)
    date_range: bool = True
    search: bool = False


def _controller(page: str, layout: ReportLayout) -> Tuple[PaginatedListController, bool]:
    """The page's controller, and whether it was just created (needs a first fetch)."""

    controller = state.page_slot(page, "controller")
    if controller is not None:
        return controller, False
    filters: Dict[str, Any] = {key: options[0] for key, (_, options) in layout.selects.items()}
    controller = PaginatedListController(api_client.report_fetch(page, layout.kind), filters=filters)
    state.set_page_slot(page, "controller", controller)
    return controller, True


def _render_filters(controller: PaginatedListController, layout: ReportLayout) -> Tuple[Dict[str, Any], int]:
    """Render the filter row and return the chosen filters and page size."""

    chosen: Dict[str, Any] = {}
    widgets = list(layout.selects.items())
    cols = st.columns(len(widgets) + (2 if layout.date_range else 0) + 1)
    position = 0
    if layout.date_range:
        start = cols[0].date_input("Start", value=None, key=f"{layout.kind}_start")
        end = cols[1].date_input("End", value=None, key=f"{layout.kind}_end")
        chosen["start"] = start.isoformat() if start else None
        chosen["end"] = end.isoformat() if end else None
        position = 2
    for key, (label, options) in widgets:
        current = controller.query.filters.get(key, options[0])
        chosen[key] = cols[position].selectbox(
            label,
            list(options),
            index=list(options).index(current) if current in options else 0,
            format_func=lambda option: option or "All",
            key=f"{layout.kind}_{key}",
        )
        position += 1
    limit_options = list(get_setting("pagination.limit_options", [10, 25, 50]))
    limit = cols[position].selectbox(
        "Rows per page",
        limit_options,
        index=limit_options.index(controller.query.limit) if controller.query.limit in limit_options else 0,
        key=f"{layout.kind}_limit",
    )
    return chosen, limit


def _pending(controller: PaginatedListController, filters: Dict[str, Any], limit: int) -> bool:
    current = controller.query.filters
    return limit != controller.query.limit or any(current.get(key) != value for key, value in filters.items())


def _render_summary(report: ReportPage | None, layout: ReportLayout) -> None:
    if report is None:
        return
    if report.error:
        components.render_error(f"Unable to load {layout.title.lower()}: {report.error}")
    if report.metrics:
        cols = st.columns(len(report.metrics))
        for col, (name, value) in zip(cols, report.metrics.items()):
            with col:
                components.render_stat(name.replace("_", " ").title(), value)
    frame = chart_frame(report.monthly, MONTHLY_COLUMNS[layout.kind])
    if not frame.empty:
        st.bar_chart(frame)
    if report.breakdown:
        components.render_records_table("Breakdown", report.breakdown, key=f"{layout.kind}_breakdown")


async def _sync(
    controller: PaginatedListController,
    *,
    fresh: bool,
    filters: Dict[str, Any],
    limit: int,
    move: str | None,
) -> None:
    if move == "next":
        await controller.next()
    elif move == "prev":
        await controller.prev()
    if not await controller.update(filters=filters, limit=limit) and fresh:
        await controller.refresh()


def render_report_page(page: str, layout: ReportLayout) -> None:
    st.set_page_config(page_title=layout.title, layout="wide")
    state.init_session_state()
    st.title(layout.title)

    if st.button("Refresh", key=f"{layout.kind}_refresh"):
        api_client.reset_page(page)
        state.set_page_slot(page, "controller", None)

    controller, fresh = _controller(page, layout)
    filters, limit = _render_filters(controller, layout)

    if layout.search:
        current = controller.query.filters.get(controller.search_key) or ""
        text = st.text_input("Search", value=current, key=f"{layout.kind}_search").strip()
        filters[controller.search_key] = text

    move = state.page_slot(page, "move")
    state.set_page_slot(page, "move", None)

    if fresh or move or _pending(controller, filters, limit):
        shell = st.empty()
        with shell.container():
            components.render_report_table(controller, layout.columns, key=f"{layout.kind}_skeleton", loading=True)
        api_client.run(_sync(controller, fresh=fresh, filters=filters, limit=limit, move=move))
        shell.empty()

    report = controller.page.extra if controller.page is not None else None
    _render_summary(report, layout)

    components.render_report_table(controller, layout.columns, key=f"{layout.kind}_table")
    action = components.render_pager(controller, key=layout.kind)
    if action:
        state.set_page_slot(page, "move", action)
        st.rerun()
