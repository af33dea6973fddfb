"""Nearby vehicle model."""

from __future__ import annotations

from pyqapac.models._base import QapacBaseModel


class NearbyVehicle(QapacBaseModel):
    """A live vehicle position. Superseded wholesale on every poll."""

    id: int
    plate: str = ""
    route_name: str = ""
    lat: float
    lon: float
