"""Internal constants shared across the library."""

BASE_URL = "https://example.com"
USER_AGENT = "pyqapac"

LOGIN_ENDPOINT = "/api/v1/auth/login"
REFRESH_ENDPOINT = "/api/v1/auth/refresh"
LOGOUT_ENDPOINT = "/api/v1/auth/logout"
NEARBY_STOPS_ENDPOINT = "/api/v1/stops/nearby"
STOP_ENDPOINT = "/api/v1/stops/{stop_id}"
ROUTES_ENDPOINT = "/api/v1/routes"
ROUTE_ENDPOINT = "/api/v1/routes/{route_id}"
NEARBY_VEHICLES_ENDPOINT = "/api/v1/vehicles/nearby"
DRIVER_POSITION_ENDPOINT = "/api/v1/driver/position"

#: Status codes that invalidate the stored session.
AUTH_FAILURE_STATUSES: frozenset[int] = frozenset({401, 403})

DEFAULT_REPORT_INTERVAL: float = 10.0
DEFAULT_VEHICLE_POLL_INTERVAL: float = 10.0
DEFAULT_NEARBY_RADIUS_M: float = 1000.0
DEFAULT_SESSION_NAMESPACE = "qapac_auth"

#: m/s -> km/h
MPS_TO_KMH: float = 3.6
