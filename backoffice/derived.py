# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Presentation-only derived fields (certificate status, age)."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from backoffice.config import get_setting

EXPIRED = "expired"
EXPIRING = "expiring"
VALID = "valid"

STATUS_LABELS = {
    EXPIRED: "Expired",
    EXPIRING: "Expiring Soon",
    VALID: "Valid",
}


def parse_date(value: Any) -> Optional[date]:
    """Parse ``date``/``datetime`` values and ISO strings; None when unparseable."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _today(today: Any = None) -> date:
    parsed = parse_date(today) if today is not None else None
    return parsed or date.today()


def days_until(expiry: date, today: datetime | date) -> int:
    """Whole days from ``today`` (time of day dropped) to ``expiry``."""

    start = today.date() if isinstance(today, datetime) else today
    delta = datetime.combine(expiry, datetime.min.time()) - datetime.combine(start, datetime.min.time())
    return math.ceil(delta.total_seconds() / 86400)


def classify(expiry_date: Any, today: Any = None) -> str:
    """Return ``expired``, ``expiring``, ``valid`` or ``""`` when unknown."""

    expiry = parse_date(expiry_date)
    if expiry is None:
        return ""
    window = int(get_setting("compliance.expiring_window_days", 30))
    diff_days = days_until(expiry, _today(today))
    if diff_days < 0:
        return EXPIRED
    if diff_days <= window:
        return EXPIRING
    return VALID


def display_status(record: Mapping[str, Any], today: Any = None) -> str:
    status = record.get("status")
    if status:
        return str(status)
    return classify(record.get("expiry_date"), today)


def status_label(status: str) -> str:
    lowered = (status or "").lower()
    if lowered == EXPIRED:
        return STATUS_LABELS[EXPIRED]
    if lowered == EXPIRING or "soon" in lowered:
        return STATUS_LABELS[EXPIRING]
    return STATUS_LABELS[VALID]


def compute_age(dob: Any, today: Any = None) -> Optional[int]:
    born = parse_date(dob)
    if born is None:
        return None
    now = _today(today)
    years = now.year - born.year - ((now.month, now.day) < (born.month, born.day))
    return abs(years)


def age_text(record: Mapping[str, Any], today: Any = None) -> str:
    age = compute_age(record.get("date_of_birth") or record.get("dob"), today)
    return "Not specified" if age is None else str(age)


def augment_certificates(rows: Iterable[Mapping[str, Any]], today: Any = None) -> List[Dict[str, Any]]:
    augmented: List[Dict[str, Any]] = []
    for row in rows:
        item = dict(row)
        item["hotel_name"] = str(row.get("hotel_name") or row.get("property_name") or "").strip()
        item["display_status"] = display_status(row, today)
        augmented.append(item)
    return augmented
