# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from typing import Any

import streamlit as st

from backoffice.reconcile import ViewState
from backoffice.session import dashboard_title
from Dashboard.lib import api_client, components, state

PAGE = "admin_overview"


def _render_distribution(data: Any) -> None:
    st.markdown("### Attendance distribution")
    df = components.records_to_dataframe(data)
    if df is None or df.empty:
        st.info("No attendance distribution yet.")
        return
    if {"name", "value"}.issubset(df.columns):
        st.bar_chart(df.set_index("name")["value"])
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)


def main() -> None:
    st.set_page_config(page_title="Admin Overview", layout="wide")
    state.init_session_state()

    session = api_client.get_session(PAGE)
    st.title(dashboard_title(session))

    if st.button("Refresh"):
        api_client.reset_page(PAGE)
        state.set_page_slot(PAGE, "view", None)

    view: ViewState | None = state.page_slot(PAGE, "view")
    if view is None:
        with st.spinner("Loading overview..."):
            view = api_client.load_overview(PAGE, previous=ViewState())
        state.set_page_slot(PAGE, "view", view)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        components.render_kpi("Attendance", view.attendance_kpi)
    with col2:
        components.render_kpi("Hotels", view.hotels_kpi)
    with col3:
        components.render_kpi("Staff", view.staff_kpi)
    with col4:
        components.render_kpi("Tasks", view.tasks_kpi)

    st.divider()
    left, right = st.columns(2)
    with left:
        components.render_records_table("Employee status", view.employee_status, key="employee_status")
    with right:
        _render_distribution(view.attendance_distribution)

    components.render_records_table("Clock-in activity", view.clock_data, key="clock_data")

    with st.expander("Raw view state"):
        st.json(view.as_dict())


if __name__ == "__main__":
    main()
