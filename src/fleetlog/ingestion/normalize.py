"""Normalization helpers.

Centralizes defensive parsing of loosely-typed API values.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def safe_id(value: Any) -> str | None:
    """Extract an entity id from either a bare string or an ``{"id": ...}`` reference."""
    if isinstance(value, dict):
        return safe_str(value.get("id"))
    return safe_str(value)


def parse_api_datetime(value: Any) -> datetime | None:
    """Parse an API date (ISO-8601 string or ``datetime``) into an aware UTC datetime.

    Returns ``None`` for missing or unparseable values.  Naive values are
    assumed to be UTC, which is what the API emits.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_api_datetime(value: datetime) -> str:
    """Format a datetime the way the API expects in search filters."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
