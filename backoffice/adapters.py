# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Response adapters.

Each adapter takes a raw response body and returns either a normalized value
or ``None`` when the body does not have the expected shape. Callers never
sniff payload shapes themselves.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from backoffice.http import FetchOutcome

KPI_FIELDS = ("current", "target", "delta", "up")


def body_of(outcome: Any) -> Any:
    """Return the payload of a successful outcome, else None."""

    if isinstance(outcome, FetchOutcome):
        return outcome.data if outcome.ok else None
    return None


def as_mapping(body: Any) -> Optional[Dict[str, Any]]:
    if isinstance(body, Mapping):
        return dict(body)
    return None


def section(body: Any, key: str) -> Optional[Dict[str, Any]]:
    """Return ``body[key]`` when both are mappings and the value is non-empty."""

    mapping = as_mapping(body)
    if mapping is None:
        return None
    value = mapping.get(key)
    if isinstance(value, Mapping) and value:
        return dict(value)
    return None


def as_collection(body: Any, keys: Sequence[str] = ("data",)) -> Optional[List[Any]]:
    if isinstance(body, list):
        return body
    mapping = as_mapping(body)
    if mapping is None:
        return None
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, list):
            return value
    return None


def collection_count(body: Any, keys: Sequence[str] = ("data",)) -> Optional[int]:
    """Count a raw list response.

    Length of the collection when there is one, else an explicit ``count``
    field, else 0. Returns None for bodies that are neither a list nor a
    mapping.
    """

    items = as_collection(body, keys)
    if items is not None:
        return len(items)
    mapping = as_mapping(body)
    if mapping is None:
        return None
    count = mapping.get("count")
    if isinstance(count, bool):
        return 0
    if isinstance(count, (int, float)):
        return int(count)
    if isinstance(count, str) and count.strip().isdigit():
        return int(count.strip())
    return 0


def kpi_patch(body: Any) -> Optional[Dict[str, Any]]:
    """Return the KPI fields present in ``body``."""

    mapping = as_mapping(body)
    if mapping is None:
        return None
    patch = {key: mapping[key] for key in KPI_FIELDS if key in mapping}
    return patch or None


def attendance_summary_kpi(body: Any) -> Optional[Dict[str, Any]]:
    """KPI fields from ``/api/attendance/summary``; falsy values are skipped."""

    mapping = as_mapping(body)
    if mapping is None:
        return None
    patch: Dict[str, Any] = {}
    for key in ("current", "target", "delta"):
        if mapping.get(key):
            patch[key] = mapping[key]
    if isinstance(mapping.get("up"), bool):
        patch["up"] = mapping["up"]
    return patch or None


def non_empty(body: Any) -> Optional[Any]:
    """Section payloads: any non-empty mapping or list."""

    if isinstance(body, Mapping) and body:
        return dict(body)
    if isinstance(body, list) and body:
        return list(body)
    return None


def normalize_hotels(body: Any) -> List[Dict[str, Any]]:
    items = as_collection(body, ("data", "rows", "hotels"))
    if items is None:
        mapping = as_mapping(body) or {}
        candidates = [v for v in mapping.values() if isinstance(v, Mapping) and (v.get("id") or v.get("name"))]
        items = candidates
    hotels: List[Dict[str, Any]] = []
    for entry in items:
        if not isinstance(entry, Mapping):
            continue
        hotel_id = entry.get("id") or entry.get("hotel_id") or entry.get("_id")
        name = entry.get("name") or entry.get("title") or entry.get("hotel_name") or (str(hotel_id) if hotel_id else "")
        if hotel_id and name:
            hotels.append({"id": hotel_id, "name": str(name)})
    return hotels


def enveloped_data(body: Any) -> Optional[Any]:
    """Unwrap ``{ok: true, data: ...}``; anything else adapts to None."""

    mapping = as_mapping(body)
    if mapping is None or mapping.get("ok") is not True:
        return None
    return mapping.get("data")


def compliance_items(body: Any) -> Optional[List[Dict[str, Any]]]:
    data = enveloped_data(body)
    if data is None:
        mapping = as_mapping(body)
        if mapping is not None and mapping.get("ok") is True:
            return []
        return None
    if not isinstance(data, list):
        return None
    return [dict(item) for item in data if isinstance(item, Mapping)]


def compliance_stats(body: Any) -> Optional[Dict[str, int]]:
    data = as_mapping(enveloped_data(body))
    if not data:
        return None
    stats: Dict[str, int] = {}
    for key in ("valid_count", "expiring_count", "expired_count"):
        try:
            stats[key] = int(data.get(key) or 0)
        except (TypeError, ValueError):
            stats[key] = 0
    return stats
