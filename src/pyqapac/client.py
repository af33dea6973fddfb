"""High-level async client for the Qapac transit backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyqapac._api import auth as _auth_api
from pyqapac._api import driver as _driver_api
from pyqapac._transport import HttpTransport, Transport
from pyqapac.cache import GeometryCache
from pyqapac.config import QapacConfig
from pyqapac.exceptions import QapacAuthError, QapacError
from pyqapac.fetcher import NearbyEntityFetcher
from pyqapac.geometry import LatLon
from pyqapac.lifecycle import PollingLifecycle
from pyqapac.models.auth import LoginResult
from pyqapac.models.position import DriverPositionSample
from pyqapac.models.route import Route, RouteDetail
from pyqapac.models.stop import Stop
from pyqapac.models.vehicle import NearbyVehicle
from pyqapac.reporter import LocationProvider, PositionReporter
from pyqapac.session import JsonFileSessionBackend, Session, SessionStore
from pyqapac.tracker import NearbyTracker

_logger = logging.getLogger(__name__)


class QapacClient:
    """Async client for the Qapac API.

    Usage::

        async with QapacClient(config) as client:
            await client.login("ana", "1234")
            stops = await client.get_nearby_stops(-7.16, -78.5)
    """

    def __init__(
        self,
        config: QapacConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        session_store: SessionStore | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config if config is not None else QapacConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        if session_store is None:
            backend = (
                JsonFileSessionBackend(self._config.session_path) if self._config.session_path else None
            )
            session_store = SessionStore(backend, namespace=self._config.session_namespace)
        self._store = session_store
        self._cache = GeometryCache()
        self._fetcher: NearbyEntityFetcher | None = None
        if transport is not None:
            self._fetcher = NearbyEntityFetcher(transport, default_radius_m=self._config.nearby_radius_m)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> QapacClient:
        if not self._external_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
            self._fetcher = NearbyEntityFetcher(self._transport, default_radius_m=self._config.nearby_radius_m)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
            self._fetcher = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> QapacConfig:
        return self._config

    @property
    def session_store(self) -> SessionStore:
        return self._store

    @property
    def geometry_cache(self) -> GeometryCache:
        return self._cache

    @property
    def fetcher(self) -> NearbyEntityFetcher:
        if self._fetcher is None:
            raise QapacError("Client not initialized. Use 'async with QapacClient(...) as client:'")
        return self._fetcher

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise QapacError("Client not initialized. Use 'async with QapacClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> Session:
        """Authenticate and persist the resulting session."""
        result: LoginResult = await _auth_api.login(self._require_transport(), username, password)
        return self._store.save(result.access_token, result.refresh_token, result.user)

    async def refresh_session(self) -> Session | None:
        """Rotate the access token using the stored refresh token.

        Returns ``None`` when there is nothing to refresh. A rejected
        refresh token clears the session and re-raises.
        """
        refresh_token = self._store.refresh_token()
        if not refresh_token:
            return None
        try:
            pair = await _auth_api.refresh(self._require_transport(), refresh_token)
        except QapacAuthError:
            _logger.warning("Refresh token rejected, clearing session")
            self._store.clear()
            raise
        return self._store.update_tokens(pair.access_token, pair.refresh_token)

    async def logout(self) -> None:
        """Revoke the refresh token server-side (best effort) and clear the session."""
        refresh_token = self._store.refresh_token()
        try:
            if refresh_token:
                await _auth_api.logout(self._require_transport(), refresh_token)
        except QapacError as exc:
            _logger.debug("Server-side logout failed: %s", exc)
        finally:
            self._store.clear()

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_nearby_stops(self, lat: float, lon: float, radius_m: float | None = None) -> list[Stop]:
        return await self.fetcher.fetch_nearby_stops(lat, lon, radius_m)

    async def get_nearby_vehicles(
        self,
        lat: float,
        lon: float,
        radius_m: float | None = None,
    ) -> list[NearbyVehicle]:
        return await self.fetcher.fetch_nearby_vehicles(lat, lon, radius_m)

    async def get_stop(self, stop_id: int) -> Stop:
        return await self.fetcher.fetch_stop_detail(stop_id)

    async def get_routes(self) -> list[Route]:
        return await self.fetcher.fetch_routes()

    async def get_route_detail(self, route_id: int) -> RouteDetail:
        """Route detail through the geometry cache (fetched once per session)."""
        return await self._cache.get_or_fetch(self.fetcher, route_id)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def report_position(self, sample: DriverPositionSample) -> None:
        """Push one sample with the stored token.

        A 401/403 clears the session before the error propagates.
        """
        token = self._store.access_token()
        if not token:
            raise QapacAuthError("Not logged in", endpoint="/api/v1/driver/position")
        try:
            await _driver_api.report_position(self._require_transport(), token, sample)
        except QapacAuthError:
            self._store.clear()
            raise

    # ------------------------------------------------------------------
    # Background loops
    # ------------------------------------------------------------------

    def create_tracker(
        self,
        *,
        on_notice: Callable[[str], None] | None = None,
        on_vehicles: Callable[[list[NearbyVehicle]], None] | None = None,
        on_stops: Callable[[list[Stop]], None] | None = None,
    ) -> NearbyTracker:
        return NearbyTracker(
            self.fetcher,
            self._cache,
            radius_m=self._config.nearby_radius_m,
            on_notice=on_notice,
            on_vehicles=on_vehicles,
            on_stops=on_stops,
        )

    def create_reporter(self, location_provider: LocationProvider) -> PositionReporter:
        return PositionReporter(
            self._require_transport(),
            self._store,
            location_provider,
            interval=self._config.report_interval,
        )

    def create_lifecycle(
        self,
        location_provider: LocationProvider,
        position_source: Callable[[], LatLon | None],
        *,
        tracker: NearbyTracker | None = None,
        on_auth_required: Callable[[], None] | None = None,
    ) -> PollingLifecycle:
        """Wire a tracker, a reporter and their loops to this client's session."""
        return PollingLifecycle(
            self._store,
            self.create_reporter(location_provider),
            tracker if tracker is not None else self.create_tracker(),
            position_source,
            vehicle_poll_interval=self._config.vehicle_poll_interval,
            on_auth_required=on_auth_required,
            server_logout=self._server_logout,
        )

    async def _server_logout(self) -> None:
        refresh_token = self._store.refresh_token()
        if refresh_token:
            await _auth_api.logout(self._require_transport(), refresh_token)
