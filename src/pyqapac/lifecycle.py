"""Start/stop the polling loops from host lifecycle and session events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pyqapac._constants import DEFAULT_VEHICLE_POLL_INTERVAL
from pyqapac._loop import PeriodicTask
from pyqapac.exceptions import QapacAuthError, QapacError
from pyqapac.geometry import LatLon
from pyqapac.models.auth import UserRole
from pyqapac.models.vehicle import NearbyVehicle
from pyqapac.reporter import PositionReporter
from pyqapac.session import Session, SessionStore
from pyqapac.tracker import NearbyTracker

_logger = logging.getLogger(__name__)


class PollingLifecycle:
    """Coordinate the vehicle-refresh loop and the position-reporting loop.

    The host translates its own lifecycle into explicit calls:

    * ``on_foreground`` / ``on_background`` start and stop vehicle polling
      (no login needed). They never touch the reporting loop.
    * session changes (login, role change, logout, auth failure) arrive
      through a :class:`SessionStore` listener and start or stop reporting.
    * ``shutdown`` stops everything.

    Starting a loop that already runs restarts it, so repeated resume
    events never leave two timers alive.
    """

    def __init__(
        self,
        session_store: SessionStore,
        reporter: PositionReporter,
        tracker: NearbyTracker,
        position_source: Callable[[], LatLon | None],
        *,
        vehicle_poll_interval: float = DEFAULT_VEHICLE_POLL_INTERVAL,
        on_auth_required: Callable[[], None] | None = None,
        server_logout: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._store = session_store
        self._reporter = reporter
        self._tracker = tracker
        self._position_source = position_source
        self._on_auth_required = on_auth_required
        self._server_logout = server_logout
        self._vehicle_task: PeriodicTask[list[NearbyVehicle] | None] = PeriodicTask(
            "vehicle-refresh",
            vehicle_poll_interval,
            self._vehicle_tick,
            on_result=tracker.apply_vehicles,
        )
        self._loop: asyncio.AbstractEventLoop | None = None
        self._foreground = False
        self._last_role: UserRole | None = session_store.role()
        self._unsubscribe: Callable[[], None] | None = session_store.add_listener(self._on_session_changed)
        reporter.on_auth_failure = self._on_reporter_auth_failure

    @property
    def is_foreground(self) -> bool:
        return self._foreground

    @property
    def is_vehicle_polling(self) -> bool:
        return self._vehicle_task.is_running

    @property
    def is_reporting(self) -> bool:
        return self._reporter.is_running

    # ------------------------------------------------------------------
    # Host lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Bind to the running loop, enter foreground and sync reporting."""
        self._loop = asyncio.get_running_loop()
        self.on_foreground()

    def on_foreground(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._foreground = True
        self._vehicle_task.start()
        self.sync_reporting()

    def on_background(self) -> None:
        self._foreground = False
        self._vehicle_task.stop()

    def on_login(self) -> None:
        """Explicit login hook for hosts that do not rely on the session listener."""
        self.sync_reporting()

    def sync_reporting(self) -> None:
        """Align the reporting loop with the current session."""
        if self._reporter.can_report():
            if not self._reporter.is_running:
                self._reporter.start()
        else:
            self._reporter.stop()

    async def on_logout(self) -> None:
        """Explicit user logout: stop reporting, tell the server, clear the session."""
        self._reporter.stop()
        try:
            if self._server_logout is not None and self._store.is_logged_in():
                await self._server_logout()
        except QapacError as exc:
            _logger.debug("Server-side logout failed: %s", exc)
        finally:
            self._store.clear()

    def shutdown(self) -> None:
        self._vehicle_task.stop()
        self._reporter.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        _logger.info("Polling lifecycle shut down")

    async def wait_idle(self) -> None:
        await self._vehicle_task.wait_idle()
        await self._reporter.wait_idle()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _vehicle_tick(self) -> list[NearbyVehicle] | None:
        position = self._position_source()
        if position is None:
            return None
        lat, lon = position
        return await self._tracker.fetch_vehicles(lat, lon)

    def _on_session_changed(self, session: Session | None) -> None:
        role = session.role if session is not None else None
        if role != self._last_role:
            _logger.info("Session role changed: %s -> %s", self._last_role, role)
        self._last_role = role
        if self._loop is None:
            # Not started yet; start() syncs reporting itself.
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._apply_session(session)
        else:
            self._loop.call_soon_threadsafe(self._apply_session, session)

    def _apply_session(self, session: Session | None) -> None:
        if session is None:
            self._reporter.stop()
            return
        self.sync_reporting()

    def _on_reporter_auth_failure(self, exc: QapacAuthError) -> None:
        _logger.warning("Authentication required after HTTP %s", exc.status_code)
        if self._on_auth_required is not None:
            self._on_auth_required()
