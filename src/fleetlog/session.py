"""Session state for authenticated API calls."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

#: Default session time-to-live in seconds (12 hours).
DEFAULT_SESSION_TTL: float = 12 * 3600


class Session(BaseModel):
    """Credentials returned by ``Authenticate``.

    Parameters
    ----------
    database : str
        Database the session is bound to.
    user_name : str
        Authenticated user name.
    session_id : str
        Opaque session token sent with every call.
    base_url : str
        Server that owns the database (after any redirect).
    created_at : float
        Monotonic timestamp (``time.monotonic()``) of the login.
    ttl : float
        Time-to-live in seconds; the session is refreshed once exceeded.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    database: str
    user_name: str
    session_id: str
    base_url: str
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_SESSION_TTL

    def credentials(self) -> dict[str, Any]:
        """Credentials object in the shape the API expects in ``params``."""
        return {
            "database": self.database,
            "userName": self.user_name,
            "sessionId": self.session_id,
        }

    @property
    def is_expired(self) -> bool:
        """Whether the session has exceeded its TTL."""
        return (time.monotonic() - self.created_at) >= self.ttl
