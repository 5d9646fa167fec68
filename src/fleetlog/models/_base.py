"""Base model for telemetry API responses.

Every wire model inherits from :class:`FleetBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from fleetlog.ingestion.normalize import parse_api_datetime

ApiDateTime = Annotated[datetime | None, BeforeValidator(parse_api_datetime)]
"""Annotated type that coerces API ISO-8601 strings to aware UTC datetimes."""


class FleetBaseModel(BaseModel):
    """Base for API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        # Keep the caller's raw= when constructing from kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
