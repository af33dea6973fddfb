"""Data models for Qapac API payloads."""

from pyqapac.models._base import QapacBaseModel
from pyqapac.models.auth import LoginResult, TokenPair, UserInfo, UserRole
from pyqapac.models.position import DriverPositionSample, LocationFix
from pyqapac.models.route import Route, RouteDetail, RouteStop, RouteVehicle
from pyqapac.models.stop import Stop
from pyqapac.models.vehicle import NearbyVehicle

__all__ = [
    "DriverPositionSample",
    "LocationFix",
    "LoginResult",
    "NearbyVehicle",
    "QapacBaseModel",
    "Route",
    "RouteDetail",
    "RouteStop",
    "RouteVehicle",
    "Stop",
    "TokenPair",
    "UserInfo",
    "UserRole",
]
