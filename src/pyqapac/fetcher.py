"""Read-only queries against the Qapac backend."""

from __future__ import annotations

import logging

from pyqapac._api import routes as _routes_api
from pyqapac._api import stops as _stops_api
from pyqapac._api import vehicles as _vehicles_api
from pyqapac._constants import DEFAULT_NEARBY_RADIUS_M
from pyqapac._transport import Transport
from pyqapac.models.route import Route, RouteDetail
from pyqapac.models.stop import Stop
from pyqapac.models.vehicle import NearbyVehicle

_logger = logging.getLogger(__name__)


class NearbyEntityFetcher:
    """Stateless facade over the public read endpoints.

    Every method raises :class:`~pyqapac.exceptions.QapacNetworkError` when
    no response arrives and :class:`~pyqapac.exceptions.QapacServerError`
    on a non-2xx status. Independent queries may run concurrently.
    """

    def __init__(self, transport: Transport, *, default_radius_m: float = DEFAULT_NEARBY_RADIUS_M) -> None:
        self._transport = transport
        self._default_radius_m = default_radius_m

    async def fetch_nearby_stops(self, lat: float, lon: float, radius_m: float | None = None) -> list[Stop]:
        radius = radius_m if radius_m is not None else self._default_radius_m
        stops = await _stops_api.fetch_nearby_stops(self._transport, lat, lon, radius)
        _logger.debug("Nearby stops lat=%.5f lon=%.5f r=%.0f -> %d", lat, lon, radius, len(stops))
        return stops

    async def fetch_nearby_vehicles(
        self,
        lat: float,
        lon: float,
        radius_m: float | None = None,
    ) -> list[NearbyVehicle]:
        radius = radius_m if radius_m is not None else self._default_radius_m
        vehicles = await _vehicles_api.fetch_nearby_vehicles(self._transport, lat, lon, radius)
        _logger.debug("Nearby vehicles lat=%.5f lon=%.5f r=%.0f -> %d", lat, lon, radius, len(vehicles))
        return vehicles

    async def fetch_stop_detail(self, stop_id: int) -> Stop:
        return await _stops_api.fetch_stop(self._transport, stop_id)

    async def fetch_routes(self) -> list[Route]:
        return await _routes_api.fetch_routes(self._transport)

    async def fetch_route_detail(self, route_id: int) -> RouteDetail:
        return await _routes_api.fetch_route_detail(self._transport, route_id)
