"""Device location fix and driver position sample."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from pyqapac._constants import MPS_TO_KMH


class LocationFix(BaseModel):
    """A single location reading from the host's location provider.

    ``bearing`` (degrees) and ``speed_mps`` are ``None`` when the fix does
    not carry them.
    """

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    bearing: float | None = None
    speed_mps: float | None = None
    accuracy_m: float | None = None


class DriverPositionSample(BaseModel):
    """Body of ``POST /api/v1/driver/position``. Built fresh every tick."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    heading: float | None = None
    speed_kmh: float | None = None

    @classmethod
    def from_fix(cls, fix: LocationFix) -> DriverPositionSample:
        return cls(
            lat=fix.lat,
            lon=fix.lon,
            heading=fix.bearing,
            speed_kmh=fix.speed_mps * MPS_TO_KMH if fix.speed_mps is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"lat": self.lat, "lon": self.lon}
        if self.heading is not None:
            payload["heading"] = self.heading
        if self.speed_kmh is not None:
            payload["speed"] = self.speed_kmh
        return payload
