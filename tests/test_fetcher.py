from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from pyqapac.exceptions import QapacAuthError, QapacNetworkError, QapacServerError
from pyqapac.fetcher import NearbyEntityFetcher


@dataclass
class FakeTransport:
    responses: dict[tuple[str, str], Any] = field(default_factory=dict)
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Any = None,
        json_body: Any = None,
        bearer_token: str | None = None,
    ) -> Any:
        self.calls.append({"method": method, "endpoint": endpoint, "params": params, "token": bearer_token})
        result = self.responses.get((method, endpoint))
        if isinstance(result, Exception):
            raise result
        return result


@pytest.mark.asyncio
async def test_nearby_stops_sends_query_and_parses() -> None:
    transport = FakeTransport(
        {
            ("GET", "/api/v1/stops/nearby"): [
                {"id": 1, "name": "Paradero Centro", "lat": -7.16, "lon": -78.5, "eta_seconds": 120},
                {"id": 2, "name": "Plaza", "lat": -7.161, "lon": -78.501},
            ]
        }
    )
    fetcher = NearbyEntityFetcher(transport, default_radius_m=800)

    stops = await fetcher.fetch_nearby_stops(-7.16, -78.5)

    assert [s.id for s in stops] == [1, 2]
    assert stops[0].eta_seconds == 120
    assert transport.calls[0]["params"] == {"lat": -7.16, "lon": -78.5, "radius": 800}


@pytest.mark.asyncio
async def test_explicit_radius_overrides_default() -> None:
    transport = FakeTransport({("GET", "/api/v1/vehicles/nearby"): []})
    await NearbyEntityFetcher(transport).fetch_nearby_vehicles(1.0, 2.0, 250)
    assert transport.calls[0]["params"]["radius"] == 250


@pytest.mark.asyncio
async def test_invalid_rows_are_skipped_and_non_lists_are_empty() -> None:
    transport = FakeTransport(
        {
            ("GET", "/api/v1/vehicles/nearby"): [
                {"id": 4, "plate": "BCX-3342", "route_name": "P07", "lat": -7.15, "lon": -78.49},
                {"id": "not-a-number", "lat": 0, "lon": 0},
            ],
            ("GET", "/api/v1/routes"): {"error": "unexpected"},
        }
    )
    fetcher = NearbyEntityFetcher(transport)

    vehicles = await fetcher.fetch_nearby_vehicles(-7.15, -78.49)
    routes = await fetcher.fetch_routes()

    assert [v.plate for v in vehicles] == ["BCX-3342"]
    assert routes == []


@pytest.mark.asyncio
async def test_stop_detail_and_route_detail_paths() -> None:
    transport = FakeTransport(
        {
            ("GET", "/api/v1/stops/42"): {"id": 42, "name": "Centro", "lat": -7.1, "lon": -78.5, "eta_seconds": 300},
            ("GET", "/api/v1/routes/3"): {
                "id": 3,
                "name": "P13",
                "active": True,
                "shape_polyline": "LINESTRING(-78.5 -7.16, -78.51 -7.17)",
                "stops": [{"id": 42, "name": "Centro", "lat": -7.16, "lon": -78.5, "sequence": 1}],
                "vehicles": [],
            },
        }
    )
    fetcher = NearbyEntityFetcher(transport)

    stop = await fetcher.fetch_stop_detail(42)
    detail = await fetcher.fetch_route_detail(3)

    assert stop.eta_seconds == 300
    assert detail.geometry[0] == (-7.16, -78.5)
    assert detail.contains_stop(42)


@pytest.mark.asyncio
async def test_detail_without_object_is_server_error() -> None:
    transport = FakeTransport({("GET", "/api/v1/stops/1"): None})
    with pytest.raises(QapacServerError, match="/api/v1/stops/1"):
        await NearbyEntityFetcher(transport).fetch_stop_detail(1)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        QapacNetworkError("offline", endpoint="/api/v1/stops/nearby"),
        QapacServerError("boom", status_code=500, endpoint="/api/v1/stops/nearby"),
        QapacAuthError("nope", status_code=403, endpoint="/api/v1/stops/nearby"),
    ],
)
async def test_transport_errors_propagate_unchanged(error: Exception) -> None:
    transport = FakeTransport({("GET", "/api/v1/stops/nearby"): error})
    with pytest.raises(type(error)):
        await NearbyEntityFetcher(transport).fetch_nearby_stops(0, 0)


def test_auth_error_is_a_server_error() -> None:
    exc = QapacAuthError("nope", status_code=401)
    assert isinstance(exc, QapacServerError)
    assert exc.status_code == 401
