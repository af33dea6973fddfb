"""Route geometry cache: route id -> :class:`RouteDetail`."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from pyqapac.exceptions import QapacError
from pyqapac.models.route import RouteDetail

_logger = logging.getLogger(__name__)


class RouteDetailSource(Protocol):
    async def fetch_route_detail(self, route_id: int) -> RouteDetail:
        ...


class GeometryCache:
    """Single source of truth for fetched route detail.

    Entries never expire within a session and a later :meth:`put` fully
    replaces an earlier one (no merge). Iteration order is insertion
    order; re-putting an existing id keeps its original position.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._routes: dict[int, RouteDetail] = {}

    def get(self, route_id: int) -> RouteDetail | None:
        with self._lock:
            return self._routes.get(route_id)

    def put(self, route_id: int, detail: RouteDetail) -> None:
        with self._lock:
            self._routes[route_id] = detail

    def find_route_containing_stop(self, stop_id: int) -> RouteDetail | None:
        """Return the first cached route whose stop list contains *stop_id*.

        A stop served by several routes resolves to whichever was cached
        first, not to a "best" match.
        """
        with self._lock:
            entries = list(self._routes.values())
        for detail in entries:
            if detail.contains_stop(stop_id):
                return detail
        return None

    def route_ids(self) -> list[int]:
        with self._lock:
            return list(self._routes)

    def clear(self) -> None:
        with self._lock:
            self._routes.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)

    def __contains__(self, route_id: object) -> bool:
        with self._lock:
            return route_id in self._routes

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    async def get_or_fetch(self, source: RouteDetailSource, route_id: int) -> RouteDetail:
        """Lazy population: fetch and cache on miss. Fetch errors propagate."""
        cached = self.get(route_id)
        if cached is not None:
            return cached
        detail = await source.fetch_route_detail(route_id)
        self.put(route_id, detail)
        return detail

    async def prefetch(self, source: RouteDetailSource, route_ids: Iterable[int]) -> list[int]:
        """Eager population for a known id list.

        Fetches run one after another so cache insertion order follows
        *route_ids*. A failed id is logged and left absent for a later lazy
        retry. Returns the ids that ended up cached.
        """
        cached: list[int] = []
        for route_id in route_ids:
            if route_id in self:
                cached.append(route_id)
                continue
            try:
                detail = await source.fetch_route_detail(route_id)
            except QapacError as exc:
                _logger.warning("Prefetch of route %s failed: %s", route_id, exc)
                continue
            self.put(route_id, detail)
            cached.append(route_id)
        _logger.debug("Prefetched %d route(s), cache size=%d", len(cached), len(self))
        return cached
