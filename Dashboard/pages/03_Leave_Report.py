# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from Dashboard.lib.report_view import ReportLayout, render_report_page

LAYOUT = ReportLayout(
    kind="leaves",
    title="Leave Report",
    columns=["employee_name", "from_date_str", "to_date_str", "days", "type", "status", "reason"],
    selects={
        "type": ("Type", ("", "annual", "casual", "medical", "others")),
        "sort": ("Sort by", ("thisyear", "lastyear")),
    },
)


def main() -> None:
    render_report_page("leave_report", LAYOUT)


if __name__ == "__main__":
    main()
