"""Client configuration for pyqapac."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyqapac._constants import (
    BASE_URL,
    DEFAULT_NEARBY_RADIUS_M,
    DEFAULT_REPORT_INTERVAL,
    DEFAULT_SESSION_NAMESPACE,
    DEFAULT_VEHICLE_POLL_INTERVAL,
)
from pyqapac.exceptions import QapacConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise QapacConfigError(f"{env_key} must be a number, got {value!r}") from exc
    if parsed <= 0:
        raise QapacConfigError(f"{env_key} must be positive, got {parsed}")
    return parsed


@dataclasses.dataclass(frozen=True)
class QapacConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL, without trailing slash.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    report_interval : float
        Seconds between two driver position reports.
    vehicle_poll_interval : float
        Seconds between two nearby-vehicle refreshes.
    nearby_radius_m : float
        Default search radius in metres for nearby queries.
    session_namespace : str
        Key under which the session is persisted.
    session_path : str or None
        Directory for the JSON session backend. ``None`` keeps the
        session in memory only.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    request_timeout: float = 15.0
    report_interval: float = DEFAULT_REPORT_INTERVAL
    vehicle_poll_interval: float = DEFAULT_VEHICLE_POLL_INTERVAL
    nearby_radius_m: float = DEFAULT_NEARBY_RADIUS_M
    session_namespace: str = DEFAULT_SESSION_NAMESPACE
    session_path: str | None = None
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise QapacConfigError("base_url must not be empty")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        for name in ("request_timeout", "report_interval", "vehicle_poll_interval", "nearby_radius_m"):
            if getattr(self, name) <= 0:
                raise QapacConfigError(f"{name} must be positive, got {getattr(self, name)}")

    @classmethod
    def from_env(cls, **overrides: Any) -> QapacConfig:
        """Create configuration from environment variables.

        Reads optional ``QAPAC_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        QapacConfig
            Populated configuration.

        Raises
        ------
        QapacConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "QAPAC_BASE_URL": "base_url",
            "QAPAC_SESSION_NAMESPACE": "session_namespace",
            "QAPAC_SESSION_PATH": "session_path",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "QAPAC_REQUEST_TIMEOUT": "request_timeout",
            "QAPAC_REPORT_INTERVAL": "report_interval",
            "QAPAC_VEHICLE_POLL_INTERVAL": "vehicle_poll_interval",
            "QAPAC_NEARBY_RADIUS": "nearby_radius_m",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("QAPAC_API_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
