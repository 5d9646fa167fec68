from __future__ import annotations

import pytest

from fleetlog.config import FleetlogConfig
from fleetlog.exceptions import FleetlogConfigError
from fleetlog.models.reading import UnitSystem

_ENV_KEYS = (
    "FLEETLOG_SERVER",
    "FLEETLOG_DATABASE",
    "FLEETLOG_USERNAME",
    "FLEETLOG_PASSWORD",
    "FLEETLOG_POLL_INTERVAL",
    "FLEETLOG_BACKUP_DIR",
    "FLEETLOG_UNIT_SYSTEM",
    "FLEETLOG_LOCAL_TIME",
    "FLEETLOG_REQUEST_TIMEOUT",
    "FLEETLOG_SESSION_TTL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = FleetlogConfig.from_env()

    assert config.server == "my.geotab.com"
    assert config.base_url == "https://my.geotab.com"
    assert config.poll_interval == 20.0
    assert config.backup_dir == "VehiclesInfoBackup"
    assert config.unit_system is UnitSystem.METRIC
    assert config.local_time is False
    assert config.has_credentials is False


def test_env_values_are_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEETLOG_SERVER", "my3.geotab.com")
    monkeypatch.setenv("FLEETLOG_DATABASE", "demo")
    monkeypatch.setenv("FLEETLOG_USERNAME", "ops@example.com")
    monkeypatch.setenv("FLEETLOG_PASSWORD", "pw")
    monkeypatch.setenv("FLEETLOG_POLL_INTERVAL", "5")
    monkeypatch.setenv("FLEETLOG_UNIT_SYSTEM", "Imperial")
    monkeypatch.setenv("FLEETLOG_LOCAL_TIME", "yes")

    config = FleetlogConfig.from_env()

    assert config.base_url == "https://my3.geotab.com"
    assert config.has_credentials is True
    assert config.poll_interval == 5.0
    assert config.unit_system is UnitSystem.IMPERIAL
    assert config.local_time is True


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEETLOG_POLL_INTERVAL", "5")
    monkeypatch.setenv("FLEETLOG_UNIT_SYSTEM", "imperial")

    config = FleetlogConfig.from_env(poll_interval=1.5, unit_system="metric", backup_dir="out")

    assert config.poll_interval == 1.5
    assert config.unit_system is UnitSystem.METRIC
    assert config.backup_dir == "out"


def test_bad_number_raises_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEETLOG_POLL_INTERVAL", "soon")

    with pytest.raises(FleetlogConfigError):
        FleetlogConfig.from_env()


def test_bad_unit_system_raises_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEETLOG_UNIT_SYSTEM", "furlongs")

    with pytest.raises(FleetlogConfigError):
        FleetlogConfig.from_env()


@pytest.mark.parametrize(
    "overrides",
    [
        {"poll_interval": 0},
        {"request_timeout": -1},
        {"session_ttl": -1},
        {"backup_dir": " "},
        {"server": ""},
    ],
)
def test_validate_rejects_out_of_range_values(overrides: dict[str, object]) -> None:
    with pytest.raises(FleetlogConfigError):
        FleetlogConfig(**overrides).validate()  # type: ignore[arg-type]


def test_explicit_scheme_is_kept() -> None:
    assert FleetlogConfig(server="http://localhost:8080/").base_url == "http://localhost:8080"
