# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from Dashboard.lib.report_view import ReportLayout, render_report_page

LAYOUT = ReportLayout(
    kind="attendance",
    title="Attendance Report",
    columns=[
        "employee_name",
        "date_str",
        "check_in",
        "status",
        "check_out",
        "break_minutes",
        "late_minutes",
        "overtime_minutes",
        "production_hours",
    ],
    selects={"status": ("Status", ("", "present", "absent", "leave"))},
)


def main() -> None:
    render_report_page("attendance_report", LAYOUT)


if __name__ == "__main__":
    main()
