"""Helpers for safe debug logging.

Every authenticated JSON-RPC call carries the session credentials, and
``Authenticate`` carries the password.  :func:`redact_for_log` masks
those before request parameters or results reach a DEBUG log.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "sessionid",
        "credentials",
        "authorization",
        "cookie",
    }
)

_MAX_DEPTH = 20


def _is_sensitive(key: Any) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def _truncate(text: str, max_string: int) -> str:
    if len(text) <= max_string:
        return text
    return f"{text[:max_string]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of a JSON-like *value* with credentials masked.

    Long strings are truncated to *max_string* characters.  Objects that
    are not JSON-like are logged by ``repr``.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _truncate(value, max_string)
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if _is_sensitive(key) else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return _truncate(repr(value), max_string)
