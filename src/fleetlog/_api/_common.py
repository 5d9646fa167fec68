"""Shared helpers for API endpoint modules.

This module centralizes the repeated patterns:
- extracting the exception type name from a JSON-RPC ``error`` object
- mapping those types to the fleetlog exception hierarchy
- attaching session credentials and posting a ``Get`` call

It is internal to fleetlog and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fleetlog._constants import DB_UNAVAILABLE_ERRORS, INVALID_USER_ERRORS
from fleetlog._transport import Transport
from fleetlog.exceptions import (
    FleetlogApiError,
    FleetlogAuthenticationError,
    FleetlogDatabaseUnavailableError,
    FleetlogSessionExpiredError,
    FleetlogTransportError,
)
from fleetlog.session import Session


def error_type(error: Mapping[str, Any]) -> str:
    """Return the server-side exception type named in a JSON-RPC error."""
    data = error.get("data")
    if isinstance(data, dict) and data.get("type"):
        return str(data["type"])
    errors = error.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("name"):
        return str(errors[0]["name"])
    return str(error.get("name", ""))


def _raise_for_error(
    *,
    method: str,
    error: Mapping[str, Any],
    authenticated: bool,
) -> None:
    kind = error_type(error)
    message = str(error.get("message", ""))
    code = str(error.get("code", ""))
    detail = f"{method} failed: {kind or 'error'} {message}".rstrip()

    if kind in INVALID_USER_ERRORS:
        exc_cls: type[FleetlogApiError] = (
            FleetlogSessionExpiredError if authenticated else FleetlogAuthenticationError
        )
        raise exc_cls(detail, code=code, method=method)
    if kind in DB_UNAVAILABLE_ERRORS:
        raise FleetlogDatabaseUnavailableError(detail, code=code, method=method)
    raise FleetlogApiError(detail, code=code, method=method)


async def call_result(
    *,
    method: str,
    params: Mapping[str, Any],
    transport: Transport,
    authenticated: bool = True,
) -> Any:
    """Post a call and return its ``result`` member.

    This is a thin helper for endpoint modules; it intentionally returns
    `Any` since results may be objects or lists.
    """
    response = await transport.call(method, params)
    error = response.get("error")
    if isinstance(error, dict):
        _raise_for_error(method=method, error=error, authenticated=authenticated)
    if "result" not in response:
        raise FleetlogTransportError(f"Missing 'result' field from {method}", method=method)
    return response["result"]


async def get_entities(
    type_name: str,
    *,
    session: Session,
    transport: Transport,
    search: Mapping[str, Any] | None = None,
    results_limit: int | None = None,
) -> list[dict[str, Any]]:
    """Run an authenticated ``Get`` for *type_name* and return the dict items."""
    params: dict[str, Any] = {
        "typeName": type_name,
        "credentials": session.credentials(),
    }
    if search:
        params["search"] = dict(search)
    if results_limit is not None:
        params["resultsLimit"] = results_limit

    result = await call_result(method="Get", params=params, transport=transport)
    if not isinstance(result, list):
        return []
    return [item for item in result if isinstance(item, dict)]
