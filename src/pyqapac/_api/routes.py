"""Route endpoints.

Endpoints:
  - GET /api/v1/routes
  - GET /api/v1/routes/{id}
"""

from __future__ import annotations

from pyqapac._api._common import parse_list, parse_object
from pyqapac._constants import ROUTE_ENDPOINT, ROUTES_ENDPOINT
from pyqapac._transport import Transport
from pyqapac.models.route import Route, RouteDetail


async def fetch_routes(transport: Transport) -> list[Route]:
    payload = await transport.request_json("GET", ROUTES_ENDPOINT)
    return parse_list(Route, payload, endpoint=ROUTES_ENDPOINT)


async def fetch_route_detail(transport: Transport, route_id: int) -> RouteDetail:
    endpoint = ROUTE_ENDPOINT.format(route_id=int(route_id))
    payload = await transport.request_json("GET", endpoint)
    return parse_object(RouteDetail, payload, endpoint=endpoint)
