"""Route summary and route detail models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from pyqapac.geometry import LatLon, decode_linestring
from pyqapac.models._base import QapacBaseModel


class Route(QapacBaseModel):
    """Summary row from ``GET /api/v1/routes``."""

    id: int
    name: str = ""
    active: bool = False
    vehicle_count: int = 0


class RouteStop(QapacBaseModel):
    id: int
    name: str = ""
    lat: float
    lon: float
    sequence: int = 0


class RouteVehicle(QapacBaseModel):
    id: int
    plate: str = ""
    driver: str = ""
    collector: str = ""
    status: str = ""


class RouteDetail(QapacBaseModel):
    """Full route from ``GET /api/v1/routes/{id}``.

    ``geometry`` is decoded from the WKT ``shape_polyline`` when not given
    explicitly. Stops are kept sorted by ``sequence``.
    """

    id: int
    name: str = ""
    active: bool = False
    shape_polyline: str | None = None
    geometry: list[LatLon] = Field(default_factory=list)
    stops: list[RouteStop] = Field(default_factory=list)
    vehicles: list[RouteVehicle] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _decode_shape(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "geometry" in values and values["geometry"] is not None:
            return values
        merged = dict(values)
        merged["geometry"] = decode_linestring(values.get("shape_polyline"))
        return merged

    @model_validator(mode="after")
    def _order_stops(self) -> RouteDetail:
        ordered = sorted(self.stops, key=lambda stop: stop.sequence)
        if ordered != self.stops:
            object.__setattr__(self, "stops", ordered)
        return self

    def contains_stop(self, stop_id: int) -> bool:
        return any(stop.id == stop_id for stop in self.stops)
