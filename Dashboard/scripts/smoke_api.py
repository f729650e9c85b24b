# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import os
import sys
from typing import Any, Dict, List, Tuple

import requests

from backoffice.endpoints import EndpointResolver, configured_candidates
from backoffice.http import build_url
from backoffice.logs import configure_root_logger
from backoffice.session import SessionContext


CHECKS: List[Tuple[str, Dict[str, Any]]] = [
    ("/api/admin/overview", {}),
    ("/api/hotels", {"limit": 1}),
    ("/api/admin/reports/attendance", {"limit": 1, "offset": 0}),
    ("/api/admin/reports/leaves", {"limit": 1, "offset": 0}),
    ("/api/admin/reports/tasks", {"limit": 1, "offset": 0}),
    ("/api/compliance/stats/summary", {}),
]


def _call(base: str, session: SessionContext, path: str, params: Dict[str, Any]) -> requests.Response:
    return requests.get(build_url(base, path), params=params, headers=session.headers(), timeout=15)


def main() -> None:
    configure_root_logger()
    session = SessionContext.from_env()
    candidates = configured_candidates(os.getenv("BACKOFFICE_PUBLIC_ORIGIN"))
    resolver = EndpointResolver(candidates)
    base = resolver.resolve()
    if base is None:
        print(f"[fail] no API base answered /health ({', '.join(candidates)})", file=sys.stderr)
        sys.exit(1)
    print(f"[ok] API base: {base}")

    failures: List[str] = []
    for path, params in CHECKS:
        try:
            response = _call(base, session, path, params)
            response.raise_for_status()
            print(f"[ok] {path}: {len(response.content)} bytes")
        except Exception as exc:  # pragma: no cover - smoke script
            failures.append(path)
            print(f"[fail] {path}: {exc}", file=sys.stderr)

    if failures:
        sys.exit(1)

    print("All smoke checks passed.")


if __name__ == "__main__":
    main()
