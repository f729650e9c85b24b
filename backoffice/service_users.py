# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Service user roster with display name, age and property."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from backoffice import adapters
from backoffice.derived import age_text
from backoffice.http import CancelToken, ResilientClient
from backoffice.logs import get_logger

log = get_logger(__name__)

PROPERTY_KEYS = ("property", "hotel_name", "property_name", "hotel")


def profile_row(record: Mapping[str, Any], today: Any = None) -> Dict[str, Any]:
    row = dict(record)
    full_name = f"{record.get('first_name') or ''} {record.get('last_name') or ''}".strip()
    row["name"] = full_name or str(record.get("name") or "").strip() or "Service User"
    row["age"] = age_text(record, today)
    row["property"] = next((record[key] for key in PROPERTY_KEYS if record.get(key)), "Not assigned")
    row["status"] = record.get("status") or "N/A"
    return row


def roster_stats(rows: List[Mapping[str, Any]]) -> Dict[str, int]:
    return {
        "total": len(rows),
        "active": sum(1 for row in rows if row.get("status") == "Active"),
        "moved_out": sum(1 for row in rows if row.get("status") == "Moved Out"),
    }


async def fetch_service_users(
    client: ResilientClient,
    *,
    today: Any = None,
    token: CancelToken | None = None,
) -> Optional[List[Dict[str, Any]]]:
    """Roster rows; None when cancelled, [] when the body is unusable."""

    outcome = await client.get("/api/su/users", token=token)
    if outcome.cancelled:
        return None
    items = adapters.as_collection(adapters.body_of(outcome), ("users", "data"))
    if items is None:
        log.debug("Service user list unavailable: %s", outcome.error or "unexpected body")
        return []
    return [profile_row(item, today) for item in items if isinstance(item, Mapping)]
