"""Driver position reporting loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from pyqapac._api import driver as _driver_api
from pyqapac._constants import DEFAULT_REPORT_INTERVAL
from pyqapac._loop import PeriodicTask
from pyqapac._transport import Transport
from pyqapac.exceptions import LocationPermissionError, QapacAuthError, QapacTransportError
from pyqapac.models.position import DriverPositionSample, LocationFix
from pyqapac.session import Session, SessionStore

_logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    """Host-side source of single, high-accuracy location fixes."""

    async def current_location(self) -> LocationFix | None:
        """Return a fresh fix, or ``None`` if none is available right now.

        Raise :class:`~pyqapac.exceptions.LocationPermissionError` when the
        app is no longer allowed to read the location.
        """
        ...


class ReporterState(StrEnum):
    IDLE = "idle"
    SAMPLING = "sampling"
    REPORTING = "reporting"


def session_can_report(session: Session | None) -> bool:
    return session is not None and session.is_logged_in and session.role.reports_position


class PositionReporter:
    """Sample the device location and push it every *interval* seconds.

    Only runs while the stored session is logged in with a driver or admin
    role. A 401/403 from the backend clears the session, stops the loop
    and fires *on_auth_failure*. Any other failure is logged and the next
    tick simply tries again; there is no backoff.

    The loop is independent of any screen and stops only on logout,
    fatal auth failure or an explicit :meth:`stop`.
    """

    def __init__(
        self,
        transport: Transport,
        session_store: SessionStore,
        location_provider: LocationProvider,
        *,
        interval: float = DEFAULT_REPORT_INTERVAL,
        on_auth_failure: Callable[[QapacAuthError], None] | None = None,
    ) -> None:
        self._transport = transport
        self._store = session_store
        self._location = location_provider
        self.on_auth_failure = on_auth_failure
        self._task: PeriodicTask[bool] = PeriodicTask("position-report", interval, self.tick)
        self._state = ReporterState.IDLE
        self._stops = 0

        self.ticks = 0
        self.reports_sent = 0
        self.reports_failed = 0
        self.samples_missed = 0

    @property
    def state(self) -> ReporterState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task.is_running

    @property
    def interval(self) -> float:
        return self._task.interval

    def can_report(self) -> bool:
        return session_can_report(self._store.snapshot())

    def start(self) -> bool:
        """Start (or restart) the loop. Returns ``False`` if the session does not qualify."""
        if not self.can_report():
            _logger.info("Position reporting not started: no driver/admin session")
            return False
        self._task.start()
        _logger.info("Position reporting started every %.0fs", self._task.interval)
        return True

    def stop(self) -> None:
        self._stops += 1
        if self._task.is_running:
            _logger.info("Position reporting stopped")
        self._task.stop()

    async def wait_idle(self) -> None:
        await self._task.wait_idle()

    async def tick(self) -> bool:
        """Run one sample-and-report cycle. Returns ``True`` if the backend accepted it."""
        self.ticks += 1
        session = self._store.snapshot()
        if not session_can_report(session):
            _logger.info("Session no longer qualifies for reporting, stopping")
            self.stop()
            return False
        stops_before = self._stops

        try:
            self._state = ReporterState.SAMPLING
            try:
                fix = await self._location.current_location()
            except LocationPermissionError as exc:
                _logger.error("Location permission missing, stopping reporter: %s", exc)
                self.stop()
                return False
            except Exception:
                _logger.debug("Location provider failed, skipping tick", exc_info=True)
                self.samples_missed += 1
                return False
            if fix is None:
                _logger.debug("Location unavailable, retrying on next tick")
                self.samples_missed += 1
                return False

            # The session may have changed while sampling.
            session = self._store.snapshot()
            if self._stops != stops_before or not session_can_report(session):
                _logger.debug("Reporter stopped while sampling, dropping fix")
                return False
            assert session is not None and session.access_token  # noqa: S101

            sample = DriverPositionSample.from_fix(fix)
            self._state = ReporterState.REPORTING
            try:
                await _driver_api.report_position(self._transport, session.access_token, sample)
            except QapacAuthError as exc:
                self.reports_failed += 1
                _logger.warning("Position report rejected (HTTP %s), ending session", exc.status_code)
                self._handle_auth_failure(exc)
                return False
            except QapacTransportError as exc:
                self.reports_failed += 1
                _logger.warning("Position report failed, retrying on next tick: %s", exc)
                return False

            self.reports_sent += 1
            _logger.debug("Position reported: %.6f, %.6f", sample.lat, sample.lon)
            return True
        finally:
            self._state = ReporterState.IDLE

    def _handle_auth_failure(self, exc: QapacAuthError) -> None:
        self.stop()
        self._store.clear()
        if self.on_auth_failure is not None:
            try:
                self.on_auth_failure(exc)
            except Exception:
                _logger.warning("on_auth_failure callback failed", exc_info=True)
