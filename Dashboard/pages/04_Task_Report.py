# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from Dashboard.lib.report_view import ReportLayout, render_report_page

LAYOUT = ReportLayout(
    kind="tasks",
    title="Task Report",
    columns=["task_name", "project_name", "created_date", "due_date", "priority", "status"],
    selects={
        "priority": ("Priority", ("", "low", "medium", "high")),
        "status": ("Status", ("", "completed", "inprogress", "pending", "onhold")),
        "sort": ("Sort by", ("last7", "last30", "thisyear")),
    },
    date_range=False,
    search=True,
)


def main() -> None:
    render_report_page("task_report", LAYOUT)


if __name__ == "__main__":
    main()
