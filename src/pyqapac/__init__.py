"""pyqapac - Async Python client and live-tracking core for the Qapac transit API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyqapac")
except PackageNotFoundError:
    __version__ = "0+local"
from pyqapac.cache import GeometryCache
from pyqapac.client import QapacClient
from pyqapac.config import QapacConfig
from pyqapac.exceptions import (
    LocationPermissionError,
    MalformedGeometryError,
    QapacAuthError,
    QapacConfigError,
    QapacError,
    QapacNetworkError,
    QapacServerError,
    QapacTransportError,
)
from pyqapac.fetcher import NearbyEntityFetcher
from pyqapac.formatting import format_distance, format_eta, haversine_m, walking_minutes
from pyqapac.geometry import decode_linestring, decode_linestring_strict
from pyqapac.lifecycle import PollingLifecycle
from pyqapac.models import (
    DriverPositionSample,
    LocationFix,
    LoginResult,
    NearbyVehicle,
    Route,
    RouteDetail,
    RouteStop,
    RouteVehicle,
    Stop,
    TokenPair,
    UserInfo,
    UserRole,
)
from pyqapac.reporter import LocationProvider, PositionReporter, ReporterState
from pyqapac.session import (
    JsonFileSessionBackend,
    MemorySessionBackend,
    Session,
    SessionBackend,
    SessionStore,
)
from pyqapac.tracker import NearbyTracker

__all__ = [
    "__version__",
    "DriverPositionSample",
    "GeometryCache",
    "JsonFileSessionBackend",
    "LocationFix",
    "LocationPermissionError",
    "LocationProvider",
    "LoginResult",
    "MalformedGeometryError",
    "MemorySessionBackend",
    "NearbyEntityFetcher",
    "NearbyTracker",
    "NearbyVehicle",
    "PollingLifecycle",
    "PositionReporter",
    "QapacAuthError",
    "QapacClient",
    "QapacConfig",
    "QapacConfigError",
    "QapacError",
    "QapacNetworkError",
    "QapacServerError",
    "QapacTransportError",
    "ReporterState",
    "Route",
    "RouteDetail",
    "RouteStop",
    "RouteVehicle",
    "Session",
    "SessionBackend",
    "SessionStore",
    "Stop",
    "TokenPair",
    "UserInfo",
    "UserRole",
    "decode_linestring",
    "decode_linestring_strict",
    "format_distance",
    "format_eta",
    "haversine_m",
    "walking_minutes",
]
