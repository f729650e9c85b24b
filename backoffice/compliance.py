# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Compliance certificates: list, stats, and create/update/delete."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from backoffice import adapters
from backoffice.config import get_setting
from backoffice.derived import augment_certificates, parse_date
from backoffice.http import CancelToken, ResilientClient, WriteClient, server_message
from backoffice.logs import get_logger

log = get_logger(__name__)

PROPERTY_FIELD = "property_id"

CERTIFICATE_TYPES = [
    "Gas Safety Certificate",
    "Electrical Installation (EICR)",
    "Fire Alarm Test",
    "Legionella Risk Assessment",
    "PAT Testing",
    "Energy Performance Certificate",
    "Fire Safety Certificate",
    "Other",
]

REQUIRED_FIELDS = ("certificate_type", "property_id", "issue_date", "expiry_date", "issued_by")

EMPTY_STATS = {"valid_count": 0, "expiring_count": 0, "expired_count": 0}


class ValidationError(ValueError):
    """Raised when a form is submitted with missing required fields."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(", ".join(f"{name}: {msg}" for name, msg in errors.items()))
        self.errors = errors


def _ymd(value: date) -> str:
    return value.isoformat()


def _next_year(today: date) -> date:
    try:
        return today.replace(year=today.year + 1)
    except ValueError:
        # 29 February
        return today.replace(year=today.year + 1, day=28)


def to_input_ymd(value: Any) -> str:
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.isoformat()
    if value is None:
        return ""
    return str(value)


@dataclass
class CertificateForm:
    certificate_type: str = ""
    property_id: Any = ""
    issue_date: str = ""
    expiry_date: str = ""
    issued_by: str = ""
    notes: str = ""

    @classmethod
    def blank(cls, hotels: Optional[List[Dict[str, Any]]] = None, today: date | None = None) -> "CertificateForm":
        today = today or date.today()
        only_hotel = hotels[0]["id"] if hotels and len(hotels) == 1 else ""
        return cls(
            property_id=only_hotel,
            issue_date=_ymd(today),
            expiry_date=_ymd(_next_year(today)),
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CertificateForm":
        return cls(
            certificate_type=record.get("certificate_type") or "",
            property_id=record.get("property_id") or record.get("hotel_id") or "",
            issue_date=to_input_ymd(record.get("issue_date")),
            expiry_date=to_input_ymd(record.get("expiry_date")),
            issued_by=record.get("issued_by") or "",
            notes=record.get("notes") or "",
        )

    def validate(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for name in REQUIRED_FIELDS:
            if not getattr(self, name):
                errors[name] = "Required"
        return errors

    def require_valid(self) -> None:
        errors = self.validate()
        if errors:
            raise ValidationError(errors)

    def payload(self, hotels: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        def clean(value: Any) -> Any:
            return None if value == "" else value

        hotel_name = None
        for hotel in hotels or []:
            if str(hotel.get("id")) == str(self.property_id):
                hotel_name = hotel.get("name")
                break
        return {
            "certificate_type": clean(self.certificate_type),
            "issue_date": clean(self.issue_date),
            "expiry_date": clean(self.expiry_date),
            "issued_by": clean(self.issued_by),
            "notes": clean(self.notes),
            PROPERTY_FIELD: self.property_id,
            "hotel_name": hotel_name,
        }


@dataclass
class WriteResult:
    ok: bool
    message: str = ""
    field_errors: Dict[str, str] = field(default_factory=dict)
    rows: Optional[List[Dict[str, Any]]] = None


def hotel_param(property_filter: Any, hotels: List[Dict[str, Any]]) -> Optional[str]:
    """The list endpoint filters by hotel name when the id is known."""

    if property_filter in (None, "", "all"):
        return None
    for hotel in hotels:
        if str(hotel.get("id")) == str(property_filter):
            return hotel.get("name")
    return str(property_filter)


async def fetch_hotels(client: ResilientClient, token: CancelToken | None = None) -> Optional[List[Dict[str, Any]]]:
    limit = int(get_setting("compliance.hotels_limit", 500))
    outcome = await client.get("/api/hotels", {"limit": limit}, token=token)
    if outcome.cancelled:
        return None
    if not outcome.ok:
        return []
    return adapters.normalize_hotels(outcome.data)


async def fetch_stats(client: ResilientClient, token: CancelToken | None = None) -> Optional[Dict[str, int]]:
    """Counts by status; None when nothing usable came back (keep the old stats)."""

    outcome = await client.get("/api/compliance/stats/summary", token=token)
    if outcome.cancelled:
        return None
    return adapters.compliance_stats(adapters.body_of(outcome))


async def fetch_certificates(
    client: ResilientClient,
    *,
    search: str = "",
    status: str = "all",
    hotel_id: Optional[str] = None,
    limit: int | None = None,
    today: Any = None,
    token: CancelToken | None = None,
) -> Optional[List[Dict[str, Any]]]:
    params = {
        "search": (search or "").strip() or None,
        "status": status if status and status != "all" else None,
        "hotel_id": hotel_id,
        "limit": limit or int(get_setting("compliance.list_limit", 200)),
    }
    outcome = await client.get("/api/compliance", params, token=token)
    if outcome.cancelled:
        return None
    items = adapters.compliance_items(adapters.body_of(outcome))
    if items is None:
        return []
    return augment_certificates(items, today)


class CertificateService:
    """Create, update and delete certificates for the compliance page."""

    def __init__(self, writer: WriteClient):
        self.writer = writer

    def submit(
        self,
        form: CertificateForm,
        *,
        cert_id: Any = None,
        hotels: Optional[List[Dict[str, Any]]] = None,
    ) -> WriteResult:
        try:
            form.require_valid()
        except ValidationError as exc:
            return WriteResult(ok=False, field_errors=exc.errors)

        payload = form.payload(hotels)
        if cert_id is not None:
            outcome = self.writer.put(f"/api/compliance/{cert_id}", payload)
        else:
            outcome = self.writer.post("/api/compliance", payload)
        if not outcome.ok:
            message = server_message(outcome, outcome.error or "Submission failed")
            log.warning("Certificate submission failed: %s", message)
            return WriteResult(ok=False, message=message)
        return WriteResult(ok=True)

    def delete(self, cert_id: Any, rows: List[Dict[str, Any]]) -> WriteResult:
        outcome = self.writer.delete(f"/api/compliance/{cert_id}")
        if not outcome.ok:
            log.warning("Certificate %s delete failed: %s", cert_id, outcome.error)
            return WriteResult(ok=False, message="Delete failed", rows=list(rows))
        remaining = [row for row in rows if row.get("id") != cert_id]
        return WriteResult(ok=True, rows=remaining)


@dataclass
class CompliancePage:
    hotels: List[Dict[str, Any]] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=lambda: dict(EMPTY_STATS))
    certificates: List[Dict[str, Any]] = field(default_factory=list)


async def load_compliance_page(
    client: ResilientClient,
    *,
    search: str = "",
    status: str = "all",
    property_filter: Any = "all",
    previous: CompliancePage | None = None,
    today: Any = None,
    token: CancelToken | None = None,
) -> Optional[CompliancePage]:
    """Hotels first (the list filter needs their names), then stats and list together.

    Returns None when ``token`` was cancelled before the join.
    """

    previous = previous or CompliancePage()
    hotels = await fetch_hotels(client, token)
    if token is not None and token.cancelled:
        return None
    hotels = hotels if hotels is not None else previous.hotels
    stats, certificates = await asyncio.gather(
        fetch_stats(client, token),
        fetch_certificates(
            client,
            search=search,
            status=status,
            hotel_id=hotel_param(property_filter, hotels),
            today=today,
            token=token,
        ),
    )
    if token is not None and token.cancelled:
        return None
    return CompliancePage(
        hotels=hotels,
        stats=stats if stats is not None else previous.stats,
        certificates=certificates if certificates is not None else previous.certificates,
    )
