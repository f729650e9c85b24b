# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import streamlit as st

from backoffice.service_users import roster_stats
from Dashboard.lib import api_client, components, state

PAGE = "service_users"
COLUMNS = ["name", "age", "property", "room_number", "status"]


def main() -> None:
    st.set_page_config(page_title="Service Users", layout="wide")
    state.init_session_state()
    st.title("Service Users")

    if st.button("Refresh"):
        api_client.reset_page(PAGE)
        state.set_page_slot(PAGE, "rows", None)

    rows = state.page_slot(PAGE, "rows")
    if rows is None:
        with st.spinner("Loading service users..."):
            rows = api_client.load_service_users(PAGE)
        state.set_page_slot(PAGE, "rows", rows)

    stats = roster_stats(rows)
    col1, col2, col3 = st.columns(3)
    with col1:
        components.render_stat("Total", stats["total"])
    with col2:
        components.render_stat("Active", stats["active"])
    with col3:
        components.render_stat("Moved out", stats["moved_out"])

    term = st.text_input("Search by name, room, or property").strip().lower()
    if term:
        rows = [
            row
            for row in rows
            if any(term in str(row.get(column) or "").lower() for column in ("name", "room_number", "property"))
        ]

    components.render_records_table(
        None,
        [{column: row.get(column, "") for column in COLUMNS} for row in rows],
        key="service_users",
    )


if __name__ == "__main__":
    main()
