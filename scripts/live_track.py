#!/usr/bin/env python3
"""Live Qapac tracking session against a running backend.

Logs in, prints nearby stops and vehicles with distances and ETAs, and
optionally runs the polling lifecycle for a while from a fixed position.

Credential sourcing:
- QAPAC_USERNAME
- QAPAC_PASSWORD

Backend URL and intervals come from the usual ``QAPAC_*`` variables
(see ``QapacConfig.from_env``).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyqapac import (  # noqa: E402
    LocationFix,
    QapacClient,
    QapacConfig,
    QapacError,
    format_distance,
    format_eta,
    haversine_m,
)
from pyqapac.models.vehicle import NearbyVehicle  # noqa: E402


class FixedLocation:
    """Location provider that always reports the same point."""

    def __init__(self, lat: float, lon: float) -> None:
        self._fix = LocationFix(lat=lat, lon=lon, bearing=0.0, speed_mps=0.0)

    async def current_location(self) -> LocationFix | None:
        return self._fix


def _print_vehicles(lat: float, lon: float, vehicles: list[NearbyVehicle]) -> None:
    print(f"\n{len(vehicles)} vehicle(s) nearby")
    for vehicle in vehicles:
        distance = format_distance(haversine_m(lat, lon, vehicle.lat, vehicle.lon))
        print(f"  {vehicle.plate:<10} {vehicle.route_name:<8} {distance}")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a live Qapac tracking session")
    parser.add_argument("--lat", type=float, default=-7.1638, help="Latitude of the simulated device.")
    parser.add_argument("--lon", type=float, default=-78.5003, help="Longitude of the simulated device.")
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to keep the polling lifecycle running. 0 only prints one snapshot.",
    )
    parser.add_argument("--anonymous", action="store_true", help="Skip login and only read public data.")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging.")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    config = QapacConfig.from_env()
    async with QapacClient(config) as client:
        if not args.anonymous:
            username = os.environ.get("QAPAC_USERNAME")
            password = os.environ.get("QAPAC_PASSWORD")
            if not username or not password:
                print("Set QAPAC_USERNAME and QAPAC_PASSWORD, or pass --anonymous")
                return 2
            try:
                session = await client.login(username, password)
            except QapacError as exc:
                print(f"Login failed: {exc}")
                return 1
            print(f"Logged in as {session.username} ({session.role})")

        stops = await client.get_nearby_stops(args.lat, args.lon)
        print(f"\n{len(stops)} stop(s) nearby")
        for stop in stops:
            detail = await client.get_stop(stop.id)
            distance = format_distance(haversine_m(args.lat, args.lon, stop.lat, stop.lon))
            print(f"  {stop.name:<30} {distance:>8}  next bus {format_eta(detail.eta_seconds)}")

        if args.duration <= 0:
            _print_vehicles(args.lat, args.lon, await client.get_nearby_vehicles(args.lat, args.lon))
            return 0

        tracker = client.create_tracker(
            on_notice=print,
            on_vehicles=lambda vehicles: _print_vehicles(args.lat, args.lon, vehicles),
        )
        lifecycle = client.create_lifecycle(
            FixedLocation(args.lat, args.lon),
            lambda: (args.lat, args.lon),
            tracker=tracker,
            on_auth_required=lambda: print("Session expired, log in again"),
        )
        lifecycle.start()
        try:
            await asyncio.sleep(args.duration)
        finally:
            lifecycle.shutdown()
            await lifecycle.wait_idle()
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
