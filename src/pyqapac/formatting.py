"""Distance and ETA display helpers. Pure functions, no state."""

from __future__ import annotations

import math

EARTH_RADIUS_M = 6_371_008.8
DEFAULT_WALKING_SPEED_MPS = 1.4


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two WGS-84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def format_distance(meters: float) -> str:
    """``850 m`` below one kilometre, ``1.2 km`` above."""
    if meters < 0 or math.isnan(meters):
        raise ValueError(f"distance must be a non-negative number, got {meters}")
    rounded = round(meters)
    if rounded < 1000:
        return f"{rounded} m"
    return f"{meters / 1000:.1f} km"


def format_eta(seconds: int | float) -> str:
    """Render an ETA in seconds.

    ``0`` (and negatives) mean unknown and render as ``--``. Minutes are
    rounded up so a bus 61 s away shows ``2 min``.
    """
    if seconds <= 0:
        return "--"
    if seconds < 60:
        return "< 1 min"
    minutes = math.ceil(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours} h {rest:02d} min"


def walking_minutes(meters: float, speed_mps: float = DEFAULT_WALKING_SPEED_MPS) -> int:
    """Whole minutes (rounded up) to walk *meters* at *speed_mps*."""
    if speed_mps <= 0:
        raise ValueError(f"speed must be positive, got {speed_mps}")
    if meters <= 0:
        return 0
    return math.ceil(meters / speed_mps / 60)
