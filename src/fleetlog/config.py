"""Client and poller configuration for fleetlog."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fleetlog._constants import DEFAULT_BACKUP_DIR, DEFAULT_POLL_INTERVAL, DEFAULT_SERVER
from fleetlog.exceptions import FleetlogConfigError
from fleetlog.models.reading import UnitSystem


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FleetlogConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FleetlogConfig:
    """Poller configuration.

    Parameters
    ----------
    server : str
        Host name of the telemetry API (e.g. ``"my.geotab.com"``).
    database : str
        Database (company) name on the server.
    username : str
        API user name.
    password : str
        API password.
    poll_interval : float
        Seconds each worker sleeps between poll cycles.
    backup_dir : str
        Directory that receives one append-only file per entity.
        Relative paths resolve against the working directory.
    unit_system : UnitSystem
        Display unit for stored odometer values.
    local_time : bool
        Write reading timestamps in local time instead of UTC.
    request_timeout : float
        Total timeout in seconds for a single API request.
    session_ttl : float
        Session time-to-live in seconds.  After this interval the client
        re-authenticates on the next call.  ``0`` disables expiry.
    """

    server: str = DEFAULT_SERVER
    database: str = ""
    username: str = ""
    password: str = ""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    backup_dir: str = DEFAULT_BACKUP_DIR
    unit_system: UnitSystem = UnitSystem.METRIC
    local_time: bool = False
    request_timeout: float = 30.0
    session_ttl: float = 12 * 3600

    @property
    def base_url(self) -> str:
        server = self.server.strip().rstrip("/")
        if server.startswith(("http://", "https://")):
            return server
        return f"https://{server}"

    @property
    def has_credentials(self) -> bool:
        return bool(self.database and self.username and self.password)

    def validate(self) -> FleetlogConfig:
        """Check value ranges, returning ``self`` for chaining.

        Raises
        ------
        FleetlogConfigError
            If a value is out of range.
        """
        if not self.server.strip():
            raise FleetlogConfigError("server must be non-empty")
        if self.poll_interval <= 0:
            raise FleetlogConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise FleetlogConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.session_ttl < 0:
            raise FleetlogConfigError(f"session_ttl must not be negative, got {self.session_ttl}")
        if not self.backup_dir.strip():
            raise FleetlogConfigError("backup_dir must be non-empty")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetlogConfig:
        """Create configuration from ``FLEETLOG_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FleetlogConfig
            Populated configuration.

        Raises
        ------
        FleetlogConfigError
            If a numeric or enum variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FLEETLOG_SERVER": "server",
            "FLEETLOG_DATABASE": "database",
            "FLEETLOG_USERNAME": "username",
            "FLEETLOG_PASSWORD": "password",
            "FLEETLOG_BACKUP_DIR": "backup_dir",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "FLEETLOG_POLL_INTERVAL": "poll_interval",
            "FLEETLOG_REQUEST_TIMEOUT": "request_timeout",
            "FLEETLOG_SESSION_TTL": "session_ttl",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        unit_env = env.get("FLEETLOG_UNIT_SYSTEM")
        if unit_env is not None and "unit_system" not in overrides:
            config_kwargs["unit_system"] = UnitSystem.parse(unit_env)

        if "local_time" not in overrides:
            config_kwargs["local_time"] = _env_bool(env.get("FLEETLOG_LOCAL_TIME"), False)

        unit_override = overrides.get("unit_system")
        if isinstance(unit_override, str):
            overrides["unit_system"] = UnitSystem.parse(unit_override)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
