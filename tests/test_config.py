from __future__ import annotations

import pytest

from pyqapac.config import QapacConfig
from pyqapac.exceptions import QapacConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "QAPAC_BASE_URL",
        "QAPAC_SESSION_NAMESPACE",
        "QAPAC_SESSION_PATH",
        "QAPAC_REQUEST_TIMEOUT",
        "QAPAC_REPORT_INTERVAL",
        "QAPAC_VEHICLE_POLL_INTERVAL",
        "QAPAC_NEARBY_RADIUS",
        "QAPAC_API_TRACE_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = QapacConfig()
    assert config.base_url == "https://example.com"
    assert config.report_interval == 10.0
    assert config.vehicle_poll_interval == 10.0
    assert config.nearby_radius_m == 1000.0
    assert config.session_namespace == "qapac_auth"
    assert config.session_path is None
    assert config.api_trace_enabled is False


def test_trailing_slash_is_stripped() -> None:
    assert QapacConfig(base_url="http://10.0.2.2:8000/").base_url == "http://10.0.2.2:8000"


@pytest.mark.parametrize("field_name", ["request_timeout", "report_interval", "vehicle_poll_interval", "nearby_radius_m"])
def test_non_positive_numbers_rejected(field_name: str) -> None:
    with pytest.raises(QapacConfigError):
        QapacConfig(**{field_name: 0})


def test_empty_base_url_rejected() -> None:
    with pytest.raises(QapacConfigError):
        QapacConfig(base_url="")


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QAPAC_BASE_URL", "http://qapac.local/")
    monkeypatch.setenv("QAPAC_REPORT_INTERVAL", "5")
    monkeypatch.setenv("QAPAC_NEARBY_RADIUS", "750.5")
    monkeypatch.setenv("QAPAC_SESSION_PATH", "/tmp/qapac")
    monkeypatch.setenv("QAPAC_API_TRACE_ENABLED", "yes")

    config = QapacConfig.from_env()

    assert config.base_url == "http://qapac.local"
    assert config.report_interval == 5.0
    assert config.nearby_radius_m == 750.5
    assert config.session_path == "/tmp/qapac"
    assert config.api_trace_enabled is True


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QAPAC_REPORT_INTERVAL", "not-a-number")
    monkeypatch.setenv("QAPAC_BASE_URL", "http://from-env")

    config = QapacConfig.from_env(report_interval=3.0, base_url="http://explicit")

    assert config.report_interval == 3.0
    assert config.base_url == "http://explicit"


@pytest.mark.parametrize("value", ["abc", "-1", "0"])
def test_from_env_invalid_number(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("QAPAC_VEHICLE_POLL_INTERVAL", value)
    with pytest.raises(QapacConfigError):
        QapacConfig.from_env()
