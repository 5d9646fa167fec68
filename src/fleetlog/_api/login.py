"""Login endpoint.

Method:
  - Authenticate
"""

from __future__ import annotations

import logging
from typing import Any

from fleetlog._api._common import call_result
from fleetlog._constants import THIS_SERVER
from fleetlog._redact import redact_for_log
from fleetlog._transport import Transport
from fleetlog.config import FleetlogConfig
from fleetlog.exceptions import FleetlogAuthenticationError

_logger = logging.getLogger(__name__)


def build_authenticate_params(config: FleetlogConfig) -> dict[str, Any]:
    """Build the ``params`` object for ``Authenticate``."""
    return {
        "database": config.database,
        "userName": config.username,
        "password": config.password,
    }


def parse_authenticate_result(result: Any, current_base_url: str) -> tuple[dict[str, str], str]:
    """Extract credentials and the owning server from an ``Authenticate`` result.

    Returns
    -------
    tuple[dict, str]
        (credentials, base_url) tuple.  ``base_url`` is *current_base_url*
        unless the server redirected the database elsewhere.

    Raises
    ------
    FleetlogAuthenticationError
        If the result is missing the credential fields.
    """
    _logger.debug("Authenticate result parsed=%s", redact_for_log(result))
    credentials = result.get("credentials") if isinstance(result, dict) else None
    if (
        not isinstance(credentials, dict)
        or not credentials.get("sessionId")
        or not credentials.get("userName")
        or not credentials.get("database")
    ):
        raise FleetlogAuthenticationError(
            "Authenticate response missing credential fields",
            method="Authenticate",
        )

    path = str(result.get("path") or THIS_SERVER).strip()
    base_url = current_base_url
    if path and path != THIS_SERVER:
        base_url = path.rstrip("/") if path.startswith(("http://", "https://")) else f"https://{path.rstrip('/')}"

    return (
        {
            "database": str(credentials["database"]),
            "userName": str(credentials["userName"]),
            "sessionId": str(credentials["sessionId"]),
        },
        base_url,
    )


async def authenticate(config: FleetlogConfig, transport: Transport, current_base_url: str) -> tuple[dict[str, str], str]:
    """Call ``Authenticate`` and return (credentials, base_url)."""
    result = await call_result(
        method="Authenticate",
        params=build_authenticate_params(config),
        transport=transport,
        authenticated=False,
    )
    return parse_authenticate_result(result, current_base_url)
