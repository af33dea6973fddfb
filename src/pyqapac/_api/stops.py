"""Stop endpoints.

Endpoints:
  - GET /api/v1/stops/nearby
  - GET /api/v1/stops/{id}
"""

from __future__ import annotations

from pyqapac._api._common import nearby_params, parse_list, parse_object
from pyqapac._constants import NEARBY_STOPS_ENDPOINT, STOP_ENDPOINT
from pyqapac._transport import Transport
from pyqapac.models.stop import Stop


async def fetch_nearby_stops(transport: Transport, lat: float, lon: float, radius_m: float) -> list[Stop]:
    payload = await transport.request_json(
        "GET",
        NEARBY_STOPS_ENDPOINT,
        params=nearby_params(lat, lon, radius_m),
    )
    return parse_list(Stop, payload, endpoint=NEARBY_STOPS_ENDPOINT)


async def fetch_stop(transport: Transport, stop_id: int) -> Stop:
    endpoint = STOP_ENDPOINT.format(stop_id=int(stop_id))
    payload = await transport.request_json("GET", endpoint)
    return parse_object(Stop, payload, endpoint=endpoint)
