from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyqapac.cache import GeometryCache
from pyqapac.exceptions import QapacAuthError
from pyqapac.fetcher import NearbyEntityFetcher
from pyqapac.lifecycle import PollingLifecycle
from pyqapac.models.auth import UserInfo, UserRole
from pyqapac.models.position import LocationFix
from pyqapac.reporter import PositionReporter
from pyqapac.session import SessionStore
from pyqapac.tracker import NearbyTracker

_VEHICLES = [{"id": 1, "plate": "DCM-1519", "route_name": "P13", "lat": -7.16, "lon": -78.5}]


@dataclass
class FakeBackend:
    position_error: Exception | None = None
    vehicle_gate: asyncio.Event | None = None
    calls: list[str] = field(default_factory=list)

    async def request_json(self, method: str, endpoint: str, **_kwargs: Any) -> Any:
        self.calls.append(endpoint)
        if endpoint == "/api/v1/vehicles/nearby":
            if self.vehicle_gate is not None:
                await self.vehicle_gate.wait()
            return _VEHICLES
        if endpoint == "/api/v1/driver/position":
            if self.position_error is not None:
                raise self.position_error
            return None
        raise AssertionError(f"Unexpected endpoint in fake backend: {endpoint}")

    def count(self, endpoint: str) -> int:
        return self.calls.count(endpoint)


class FixedLocation:
    async def current_location(self) -> LocationFix | None:
        return LocationFix(lat=-7.16, lon=-78.5)


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


def _login(store: SessionStore, role: UserRole) -> None:
    store.save("T1", "R1", UserInfo(id=1, username="u", full_name="U", role=role))


def _lifecycle(
    backend: FakeBackend,
    store: SessionStore,
    **kwargs: Any,
) -> tuple[PollingLifecycle, NearbyTracker]:
    tracker = NearbyTracker(NearbyEntityFetcher(backend), GeometryCache())
    reporter = PositionReporter(backend, store, FixedLocation(), interval=60)
    lifecycle = PollingLifecycle(
        store,
        reporter,
        tracker,
        lambda: (-7.16, -78.5),
        vehicle_poll_interval=60,
        **kwargs,
    )
    return lifecycle, tracker


@pytest.mark.asyncio
async def test_foreground_polls_vehicles_without_login() -> None:
    backend = FakeBackend()
    lifecycle, tracker = _lifecycle(backend, SessionStore())

    lifecycle.start()
    await _settle()

    assert lifecycle.is_vehicle_polling is True
    assert lifecycle.is_reporting is False
    assert [v.plate for v in tracker.vehicles] == ["DCM-1519"]
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_background_stops_vehicle_polling_and_resume_restarts_once() -> None:
    backend = FakeBackend()
    lifecycle, _ = _lifecycle(backend, SessionStore())

    lifecycle.on_foreground()
    await _settle()
    lifecycle.on_background()
    assert lifecycle.is_vehicle_polling is False

    for _ in range(3):
        lifecycle.on_foreground()
    await _settle()

    assert lifecycle.is_vehicle_polling is True
    # One tick for the first foreground, one for the (restarted) resume.
    assert backend.count("/api/v1/vehicles/nearby") == 2
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_in_flight_vehicle_result_discarded_after_background() -> None:
    gate = asyncio.Event()
    backend = FakeBackend(vehicle_gate=gate)
    lifecycle, tracker = _lifecycle(backend, SessionStore())

    lifecycle.on_foreground()
    await _settle()
    lifecycle.on_background()
    gate.set()
    await lifecycle.wait_idle()

    assert backend.count("/api/v1/vehicles/nearby") == 1
    assert tracker.vehicles == []


@pytest.mark.asyncio
async def test_driver_session_reports_and_survives_background() -> None:
    backend = FakeBackend()
    store = SessionStore()
    _login(store, UserRole.DRIVER)
    lifecycle, _ = _lifecycle(backend, store)

    lifecycle.start()
    await _settle()
    lifecycle.on_background()
    await _settle()

    assert lifecycle.is_reporting is True
    assert backend.count("/api/v1/driver/position") == 1
    lifecycle.shutdown()
    assert lifecycle.is_reporting is False


@pytest.mark.asyncio
async def test_login_and_role_changes_drive_reporting() -> None:
    backend = FakeBackend()
    store = SessionStore()
    lifecycle, _ = _lifecycle(backend, store)

    lifecycle.start()
    assert lifecycle.is_reporting is False

    _login(store, UserRole.DRIVER)
    assert lifecycle.is_reporting is True

    _login(store, UserRole.RIDER)
    assert lifecycle.is_reporting is False

    _login(store, UserRole.ADMIN)
    assert lifecycle.is_reporting is True

    store.clear()
    assert lifecycle.is_reporting is False
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_logout_stops_reporting_calls_server_and_clears_session() -> None:
    backend = FakeBackend()
    store = SessionStore()
    _login(store, UserRole.DRIVER)
    logouts: list[str] = []

    async def _server_logout() -> None:
        logouts.append(store.refresh_token() or "")

    lifecycle, _ = _lifecycle(backend, store, server_logout=_server_logout)
    lifecycle.start()
    await _settle()

    await lifecycle.on_logout()

    assert logouts == ["R1"]
    assert store.is_logged_in() is False
    assert lifecycle.is_reporting is False
    assert lifecycle.is_vehicle_polling is True
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_auth_failure_requests_authentication_and_stops_reporting() -> None:
    backend = FakeBackend(position_error=QapacAuthError("HTTP 401", status_code=401))
    store = SessionStore()
    _login(store, UserRole.DRIVER)
    redirects: list[bool] = []
    lifecycle, _ = _lifecycle(backend, store, on_auth_required=lambda: redirects.append(True))

    lifecycle.start()
    await _settle()
    await lifecycle.wait_idle()

    assert redirects == [True]
    assert store.is_logged_in() is False
    assert lifecycle.is_reporting is False
    assert backend.count("/api/v1/driver/position") == 1
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_shutdown_detaches_from_session_changes() -> None:
    backend = FakeBackend()
    store = SessionStore()
    lifecycle, _ = _lifecycle(backend, store)

    lifecycle.start()
    lifecycle.shutdown()
    _login(store, UserRole.DRIVER)

    assert lifecycle.is_reporting is False
    assert lifecycle.is_vehicle_polling is False


@pytest.mark.asyncio
async def test_session_change_from_another_thread_is_marshalled_to_loop() -> None:
    backend = FakeBackend()
    store = SessionStore()
    lifecycle, _ = _lifecycle(backend, store)
    lifecycle.start()

    await asyncio.to_thread(_login, store, UserRole.DRIVER)
    await _settle()

    assert lifecycle.is_reporting is True
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_explicit_login_hook_starts_reporting_only() -> None:
    backend = FakeBackend()
    store = SessionStore()
    _login(store, UserRole.DRIVER)
    lifecycle, _ = _lifecycle(backend, store)

    lifecycle.on_login()

    assert lifecycle.is_reporting is True
    assert lifecycle.is_vehicle_polling is False
    lifecycle.shutdown()


@pytest.mark.asyncio
async def test_logout_clears_session_even_when_server_call_crashes() -> None:
    store = SessionStore()
    _login(store, UserRole.DRIVER)

    async def _server_logout() -> None:
        raise RuntimeError("connection pool closed")

    lifecycle, _ = _lifecycle(FakeBackend(), store, server_logout=_server_logout)

    with pytest.raises(RuntimeError):
        await lifecycle.on_logout()

    assert store.is_logged_in() is False
    assert lifecycle.is_reporting is False
