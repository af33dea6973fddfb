"""Rider-side view state: last good stops and vehicles, route lookup by stop."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyqapac.cache import GeometryCache
from pyqapac.exceptions import QapacError
from pyqapac.fetcher import NearbyEntityFetcher
from pyqapac.models.route import RouteDetail
from pyqapac.models.stop import Stop
from pyqapac.models.vehicle import NearbyVehicle

_logger = logging.getLogger(__name__)


class NearbyTracker:
    """Holds what the map currently shows and refreshes it from the backend.

    Failure policy differs per layer:

    * stops: keep the previous set and emit a transient notice;
    * vehicles: keep the previous set, say nothing (the next poll retries).

    Neither layer is ever replaced by an empty list because of an error.
    """

    def __init__(
        self,
        fetcher: NearbyEntityFetcher,
        cache: GeometryCache,
        *,
        radius_m: float | None = None,
        on_notice: Callable[[str], None] | None = None,
        on_vehicles: Callable[[list[NearbyVehicle]], None] | None = None,
        on_stops: Callable[[list[Stop]], None] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._radius_m = radius_m
        self._on_notice = on_notice
        self._on_vehicles = on_vehicles
        self._on_stops = on_stops
        self._stops: tuple[Stop, ...] = ()
        self._vehicles: tuple[NearbyVehicle, ...] = ()

    @property
    def stops(self) -> list[Stop]:
        return list(self._stops)

    @property
    def vehicles(self) -> list[NearbyVehicle]:
        return list(self._vehicles)

    @property
    def cache(self) -> GeometryCache:
        return self._cache

    def _notice(self, message: str) -> None:
        _logger.info("%s", message)
        if self._on_notice is not None:
            self._on_notice(message)

    async def refresh_stops(self, lat: float, lon: float) -> bool:
        try:
            stops = await self._fetcher.fetch_nearby_stops(lat, lon, self._radius_m)
        except QapacError as exc:
            _logger.warning("Nearby stops refresh failed: %s", exc)
            self._notice("Could not load nearby stops")
            return False
        self._stops = tuple(stops)
        if self._on_stops is not None:
            self._on_stops(list(self._stops))
        return True

    async def fetch_vehicles(self, lat: float, lon: float) -> list[NearbyVehicle] | None:
        """Fetch without applying; ``None`` on failure."""
        try:
            return await self._fetcher.fetch_nearby_vehicles(lat, lon, self._radius_m)
        except QapacError as exc:
            _logger.debug("Nearby vehicles refresh failed: %s", exc)
            return None

    def apply_vehicles(self, vehicles: list[NearbyVehicle] | None) -> None:
        """Replace the vehicle layer wholesale. ``None`` leaves it untouched."""
        if vehicles is None:
            return
        self._vehicles = tuple(vehicles)
        if self._on_vehicles is not None:
            self._on_vehicles(list(self._vehicles))

    async def refresh_vehicles(self, lat: float, lon: float) -> bool:
        vehicles = await self.fetch_vehicles(lat, lon)
        self.apply_vehicles(vehicles)
        return vehicles is not None

    async def stop_detail(self, stop_id: int) -> Stop | None:
        """Fetch a stop with its ETA; ``None`` (plus a notice) on failure."""
        try:
            return await self._fetcher.fetch_stop_detail(stop_id)
        except QapacError as exc:
            _logger.warning("Stop %s detail failed: %s", stop_id, exc)
            self._notice("Could not load stop information")
            return None

    async def route_for_stop(self, stop_id: int) -> RouteDetail | None:
        """Route serving *stop_id*, populating the cache on a miss.

        On a miss every route not cached yet is fetched (in the order the
        backend lists them) before searching again.
        """
        hit = self._cache.find_route_containing_stop(stop_id)
        if hit is not None:
            return hit
        try:
            routes = await self._fetcher.fetch_routes()
        except QapacError as exc:
            _logger.warning("Route list failed: %s", exc)
            return None
        missing = [route.id for route in routes if route.id not in self._cache]
        if missing:
            await self._cache.prefetch(self._fetcher, missing)
        return self._cache.find_route_containing_stop(stop_id)
