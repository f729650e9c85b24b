# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import streamlit as st

from backoffice.session import dashboard_title
from Dashboard.lib import api_client, components, state


def main() -> None:
    st.set_page_config(page_title="Backoffice Dashboard", layout="wide")
    state.init_session_state()
    state.sync_query_params_from_url()

    session = api_client.get_session("home")
    st.title(dashboard_title(session))
    st.caption("Hotel operations and HR back office.")

    st.subheader("Pages")
    components.render_navigation_links()

    st.markdown(
        """
        The dashboard is organized into focused pages:

        * **Admin Overview** – KPI boxes, employee status, attendance distribution and clock-in activity.
        * **Compliance** – property certificates with expiry tracking.
        * **Attendance / Leave / Task Reports** – paginated, filterable reports with monthly charts.
        """
    )

    with st.sidebar:
        st.header("Navigation")
        components.render_navigation_links(use_container=True)
        st.divider()
        if api_client.get_resolver("home").resolved is None:
            st.caption(f"API base (unverified): {session.base_url}")
        else:
            st.caption(f"API base: {session.base_url}")


if __name__ == "__main__":
    main()
