# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Session context injected into every loader and page."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass
class SessionContext:
    base_url: str = ""
    token: str = ""
    user: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, user: Optional[Mapping[str, Any]] = None) -> "SessionContext":
        base = os.getenv("BACKOFFICE_API_BASE") or ""
        token = os.getenv("BACKOFFICE_API_TOKEN") or ""
        return cls(base_url=base.rstrip("/"), token=token, user=dict(user or {}))

    @property
    def role(self) -> str:
        return str(self.user.get("role") or "").strip().lower()

    def headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


def dashboard_title(session: SessionContext | None) -> str:
    if session is not None and session.role == "manager":
        return "Manager Dashboard"
    return "Admin Dashboard"
