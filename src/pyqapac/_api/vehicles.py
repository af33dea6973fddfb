"""Vehicle endpoints.

Endpoints:
  - GET /api/v1/vehicles/nearby
"""

from __future__ import annotations

from pyqapac._api._common import nearby_params, parse_list
from pyqapac._constants import NEARBY_VEHICLES_ENDPOINT
from pyqapac._transport import Transport
from pyqapac.models.vehicle import NearbyVehicle


async def fetch_nearby_vehicles(
    transport: Transport,
    lat: float,
    lon: float,
    radius_m: float,
) -> list[NearbyVehicle]:
    payload = await transport.request_json(
        "GET",
        NEARBY_VEHICLES_ENDPOINT,
        params=nearby_params(lat, lon, radius_m),
    )
    return parse_list(NearbyVehicle, payload, endpoint=NEARBY_VEHICLES_ENDPOINT)
