# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from backoffice.config import get_setting
from backoffice.http import CancelToken
from backoffice.logs import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class PageQuery:
    limit: int = 10
    offset: int = 0
    filters: Mapping[str, Any] = field(default_factory=dict)

    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"limit": self.limit, "offset": self.offset}
        for key, value in self.filters.items():
            if value not in (None, "", "all"):
                params[key] = value
        return params


@dataclass
class Page:
    rows: List[Any]
    total: int
    extra: Any = None


FetchPage = Callable[[PageQuery, CancelToken], Awaitable[Optional[Page]]]


class PaginatedListController:
    """Limit/offset/filter state for one report table.

    Every mutation triggers exactly one refetch: structured filters, paging
    and page size immediately, free-text search after a debounce. ``total``
    always comes from the latest server page.
    """

    def __init__(
        self,
        fetch: FetchPage,
        *,
        limit: int | None = None,
        filters: Mapping[str, Any] | None = None,
        debounce_s: float | None = None,
        search_key: str = "search",
    ) -> None:
        if limit is None:
            limit = int(get_setting("pagination.default_limit", 10))
        if debounce_s is None:
            debounce_s = float(get_setting("pagination.search_debounce_s", 0.3))
        self._fetch = fetch
        self.query = PageQuery(limit=limit, offset=0, filters=dict(filters or {}))
        self.debounce_s = debounce_s
        self.search_key = search_key
        self.rows: List[Any] = []
        self.total = 0
        self.page: Page | None = None
        self.loading = False
        self._generation = 0
        self._token: CancelToken | None = None
        self._pending_search: asyncio.Task | None = None

    async def refresh(self) -> Optional[Page]:
        if self._token is not None:
            self._token.cancel()
        self._generation += 1
        generation = self._generation
        token = CancelToken()
        self._token = token
        self.loading = True
        try:
            page = await self._fetch(self.query, token)
        finally:
            if generation == self._generation:
                self.loading = False
        if token.cancelled or generation != self._generation or page is None:
            return None
        self.page = page
        self.rows = list(page.rows)
        self.total = int(page.total or 0)
        return page

    async def _apply(self, query: PageQuery) -> Optional[Page]:
        self.query = query
        return await self.refresh()

    def has_next(self) -> bool:
        return self.query.offset + self.query.limit < self.total

    def has_prev(self) -> bool:
        return self.query.offset > 0

    async def next(self) -> bool:
        if not self.has_next():
            return False
        await self._apply(replace(self.query, offset=self.query.offset + self.query.limit))
        return True

    async def prev(self) -> bool:
        if not self.has_prev():
            return False
        await self._apply(replace(self.query, offset=max(0, self.query.offset - self.query.limit)))
        return True

    async def set_limit(self, limit: int) -> bool:
        limit = max(1, int(limit))
        if limit == self.query.limit:
            return False
        await self._apply(replace(self.query, limit=limit, offset=0))
        return True

    async def set_filter(self, key: str, value: Any) -> bool:
        if self.query.filters.get(key) == value:
            return False
        filters = {**self.query.filters, key: value}
        await self._apply(replace(self.query, filters=filters, offset=0))
        return True

    async def update(self, *, filters: Optional[Dict[str, Any]] = None, limit: int | None = None) -> bool:
        """Apply several filter and limit changes with a single refetch."""

        merged = {**self.query.filters, **(filters or {})}
        limit = self.query.limit if limit is None else max(1, int(limit))
        if merged == self.query.filters and limit == self.query.limit:
            return False
        await self._apply(replace(self.query, filters=merged, limit=limit, offset=0))
        return True

    def set_search(self, text: str) -> asyncio.Task:
        """Schedule a debounced search refetch; each call replaces the last."""

        if self._pending_search is not None and not self._pending_search.done():
            self._pending_search.cancel()
        self._pending_search = asyncio.ensure_future(self._debounced_search(text))
        return self._pending_search

    async def _debounced_search(self, text: str) -> bool:
        await asyncio.sleep(self.debounce_s)
        return await self.set_filter(self.search_key, (text or "").strip())

    def close(self) -> None:
        if self._pending_search is not None and not self._pending_search.done():
            self._pending_search.cancel()
        if self._token is not None:
            self._token.cancel()

    def placeholder_rows(self, columns: List[str], count: int | None = None) -> List[Dict[str, str]]:
        """Skeleton rows shown while loading so the table keeps its shape."""

        size = count if count is not None else min(self.query.limit, 5)
        return [{column: "…" for column in columns} for _ in range(size)]

    def showing(self) -> Tuple[int, int, int]:
        start = min(self.query.offset + 1, self.total)
        end = min(self.query.offset + self.query.limit, self.total)
        return start, end, self.total
