"""Stop model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pyqapac.models._base import QapacBaseModel


class Stop(QapacBaseModel):
    """A transit stop as returned by the nearby and detail endpoints.

    Parameters
    ----------
    id : int
        Stop identifier.
    name : str
        Display name.
    lat, lon : float
        WGS-84 coordinates.
    eta_seconds : int
        Seconds until the next vehicle reaches the stop; ``0`` when unknown.
        The nearby endpoint usually omits it.
    """

    id: int
    name: str = ""
    lat: float
    lon: float
    eta_seconds: int = 0

    @field_validator("eta_seconds", mode="before")
    @classmethod
    def _clamp_eta(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and value < 0:
            return 0
        return value

    @property
    def has_eta(self) -> bool:
        return self.eta_seconds > 0
