# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from typing import Any, Dict

import streamlit as st

SESSION_DEFAULTS: Dict[str, Any] = {
    "compliance_search": "",
    "compliance_status": "all",
    "compliance_property": "all",
    "user": {},
}

# query param -> session key
QUERY_PARAMS: Dict[str, str] = {
    "search": "compliance_search",
    "status": "compliance_status",
    "property": "compliance_property",
}


def init_session_state() -> None:
    for key, value in SESSION_DEFAULTS.items():
        st.session_state.setdefault(key, value)


def page_slot(page: str, key: str, default: Any = None) -> Any:
    """Per-page state that survives reruns (loaders, controllers, last view)."""

    slots: Dict[str, Dict[str, Any]] = st.session_state.setdefault("_page_slots", {})
    return slots.setdefault(page, {}).get(key, default)


def set_page_slot(page: str, key: str, value: Any) -> None:
    slots: Dict[str, Dict[str, Any]] = st.session_state.setdefault("_page_slots", {})
    slots.setdefault(page, {})[key] = value


def sync_query_params_from_url() -> None:
    params = st.query_params
    for param, key in QUERY_PARAMS.items():
        value = params.get(param)
        if value:
            st.session_state[key] = str(value)


def update_query_params(**kwargs: Any) -> None:
    for key, value in kwargs.items():
        if value in (None, "", "all"):
            st.query_params.pop(key, None)
        else:
            st.query_params[key] = str(value)
