# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

import streamlit as st

from backoffice.compliance import (
    CERTIFICATE_TYPES,
    CertificateForm,
    CertificateService,
    CompliancePage,
)
from backoffice.derived import status_label
from Dashboard.lib import api_client, components, state

PAGE = "compliance"
STATUS_OPTIONS = ["all", "valid", "expiring", "expired"]


def _hotel_label(hotels: List[Dict[str, Any]], hotel_id: Any) -> str:
    for hotel in hotels:
        if str(hotel.get("id")) == str(hotel_id):
            return str(hotel.get("name"))
    return "All properties" if hotel_id == "all" else str(hotel_id)


def _render_form(page_data: CompliancePage, service: CertificateService) -> None:
    editing = state.page_slot(PAGE, "editing")
    form_state: CertificateForm = state.page_slot(PAGE, "form") or CertificateForm.blank(page_data.hotels)
    errors: Dict[str, str] = state.page_slot(PAGE, "field_errors") or {}

    st.markdown("### Edit certificate" if editing is not None else "### Add certificate")
    hotel_ids = [hotel["id"] for hotel in page_data.hotels]
    with st.form("certificate_form"):
        type_options = [""] + CERTIFICATE_TYPES
        certificate_type = st.selectbox(
            "Certificate type",
            type_options,
            index=type_options.index(form_state.certificate_type) if form_state.certificate_type in type_options else 0,
        )
        if "certificate_type" in errors:
            st.caption(f":red[{errors['certificate_type']}]")
        property_options = [""] + hotel_ids
        property_id = st.selectbox(
            "Property",
            property_options,
            index=property_options.index(form_state.property_id) if form_state.property_id in property_options else 0,
            format_func=lambda value: _hotel_label(page_data.hotels, value) if value != "" else "Select a property",
        )
        if "property_id" in errors:
            st.caption(f":red[{errors['property_id']}]")
        issue_date = st.text_input("Issue date (YYYY-MM-DD)", value=form_state.issue_date)
        if "issue_date" in errors:
            st.caption(f":red[{errors['issue_date']}]")
        expiry_date = st.text_input("Expiry date (YYYY-MM-DD)", value=form_state.expiry_date)
        if "expiry_date" in errors:
            st.caption(f":red[{errors['expiry_date']}]")
        issued_by = st.text_input("Issued by", value=form_state.issued_by)
        if "issued_by" in errors:
            st.caption(f":red[{errors['issued_by']}]")
        notes = st.text_area("Notes", value=form_state.notes)
        submitted = st.form_submit_button("Save")

    if st.button("Cancel", key="certificate_cancel"):
        _close_form()
        st.rerun()

    if not submitted:
        return

    form = CertificateForm(
        certificate_type=certificate_type,
        property_id=property_id,
        issue_date=issue_date.strip(),
        expiry_date=expiry_date.strip(),
        issued_by=issued_by.strip(),
        notes=notes,
    )
    result = service.submit(form, cert_id=editing, hotels=page_data.hotels)
    state.set_page_slot(PAGE, "form", form)
    state.set_page_slot(PAGE, "field_errors", result.field_errors)
    if result.ok:
        _close_form()
        state.set_page_slot(PAGE, "data", None)
        st.rerun()
    else:
        if result.message:
            state.set_page_slot(PAGE, "write_error", result.message)
        st.rerun()


def _close_form() -> None:
    state.set_page_slot(PAGE, "show_form", False)
    state.set_page_slot(PAGE, "editing", None)
    state.set_page_slot(PAGE, "form", None)
    state.set_page_slot(PAGE, "field_errors", {})


def _render_list(page_data: CompliancePage, service: CertificateService) -> None:
    rows = page_data.certificates
    if not rows:
        st.info("No certificates found.")
        return
    for row in rows:
        cols = st.columns([3, 3, 2, 2, 2, 1, 1])
        cols[0].write(row.get("certificate_type") or "")
        cols[1].write(row.get("hotel_name") or "")
        cols[2].write(str(row.get("issue_date") or ""))
        cols[3].write(str(row.get("expiry_date") or ""))
        cols[4].write(status_label(row.get("display_status") or ""))
        if cols[5].button("Edit", key=f"edit_{row.get('id')}"):
            state.set_page_slot(PAGE, "show_form", True)
            state.set_page_slot(PAGE, "editing", row.get("id"))
            state.set_page_slot(PAGE, "form", CertificateForm.from_record(row))
            state.set_page_slot(PAGE, "field_errors", {})
            st.rerun()
        if cols[6].button("Delete", key=f"delete_{row.get('id')}"):
            state.set_page_slot(PAGE, "confirm_delete", row.get("id"))
            st.rerun()
        if state.page_slot(PAGE, "confirm_delete") == row.get("id"):
            _render_delete_confirm(row, page_data, service)


def _render_delete_confirm(row, page_data: CompliancePage, service: CertificateService) -> None:
    st.warning(f"Delete {row.get('certificate_type') or 'this certificate'}? This cannot be undone.")
    yes, no, _ = st.columns([1, 1, 6])
    if yes.button("Confirm delete", key=f"confirm_delete_{row.get('id')}", type="primary"):
        state.set_page_slot(PAGE, "confirm_delete", None)
        result = service.delete(row.get("id"), page_data.certificates)
        if result.ok:
            page_data.certificates = result.rows or []
            state.set_page_slot(PAGE, "data", page_data)
        else:
            state.set_page_slot(PAGE, "write_error", result.message)
        st.rerun()
    if no.button("Cancel", key=f"cancel_delete_{row.get('id')}"):
        state.set_page_slot(PAGE, "confirm_delete", None)
        st.rerun()


def main() -> None:
    st.set_page_config(page_title="Compliance", layout="wide")
    state.init_session_state()
    state.sync_query_params_from_url()

    st.title("Compliance")
    st.caption("Property certificates and expiry tracking.")

    previous: CompliancePage | None = state.page_slot(PAGE, "data")
    hotels = previous.hotels if previous is not None else []

    col1, col2, col3 = st.columns([3, 2, 2])
    with col1:
        search = st.text_input("Search", value=st.session_state["compliance_search"])
    with col2:
        status = st.selectbox(
            "Status",
            STATUS_OPTIONS,
            index=STATUS_OPTIONS.index(st.session_state["compliance_status"])
            if st.session_state["compliance_status"] in STATUS_OPTIONS
            else 0,
            format_func=lambda value: "All statuses" if value == "all" else status_label(value),
        )
    with col3:
        property_options = ["all"] + [str(hotel["id"]) for hotel in hotels]
        current_property = st.session_state["compliance_property"]
        property_filter = st.selectbox(
            "Property",
            property_options,
            index=property_options.index(current_property) if current_property in property_options else 0,
            format_func=lambda value: _hotel_label(hotels, value),
        )

    filters = (search, status, property_filter)
    if filters != state.page_slot(PAGE, "filters"):
        st.session_state["compliance_search"] = search
        st.session_state["compliance_status"] = status
        st.session_state["compliance_property"] = property_filter
        state.set_page_slot(PAGE, "filters", filters)
        state.update_query_params(search=search, status=status, property=property_filter)
        state.set_page_slot(PAGE, "data", None)

    page_data: CompliancePage | None = state.page_slot(PAGE, "data")
    if page_data is None:
        with st.spinner("Loading certificates..."):
            page_data = api_client.load_compliance(
                PAGE,
                search=search,
                status=status,
                property_filter=property_filter,
                previous=previous,
            )
        state.set_page_slot(PAGE, "data", page_data)

    write_error = state.page_slot(PAGE, "write_error")
    if write_error:
        components.render_error(write_error)
        if st.button("Dismiss"):
            state.set_page_slot(PAGE, "write_error", None)
            st.rerun()

    stat1, stat2, stat3 = st.columns(3)
    with stat1:
        components.render_stat("Valid", page_data.stats.get("valid_count"))
    with stat2:
        components.render_stat("Expiring soon", page_data.stats.get("expiring_count"))
    with stat3:
        components.render_stat("Expired", page_data.stats.get("expired_count"))

    service = CertificateService(api_client.get_writer(PAGE))

    if not state.page_slot(PAGE, "show_form"):
        if st.button("Add certificate"):
            state.set_page_slot(PAGE, "show_form", True)
            state.set_page_slot(PAGE, "editing", None)
            state.set_page_slot(PAGE, "form", CertificateForm.blank(page_data.hotels, date.today()))
            st.rerun()
    else:
        _render_form(page_data, service)

    st.divider()
    _render_list(page_data, service)


if __name__ == "__main__":
    main()
