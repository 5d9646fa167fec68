"""Device status endpoints.

Methods:
  - Get ``DeviceStatusInfo`` (position and last-seen time)
  - Get ``StatusData`` for the odometer diagnostic
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from fleetlog._api._common import get_entities
from fleetlog._constants import DIAGNOSTIC_ODOMETER_ID
from fleetlog._transport import Transport
from fleetlog.ingestion.normalize import format_api_datetime
from fleetlog.models.status import DeviceStatusInfo, StatusData
from fleetlog.session import Session

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_items(model: type[M], items: Iterable[dict[str, Any]]) -> list[M]:
    parsed: list[M] = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping unparseable %s item", model.__name__, exc_info=True)
    return parsed


async def fetch_device_status_info(
    session: Session,
    transport: Transport,
    device_id: str,
) -> list[DeviceStatusInfo]:
    """Fetch the status records for one device (normally exactly one)."""
    items = await get_entities(
        "DeviceStatusInfo",
        session=session,
        transport=transport,
        search={"deviceSearch": {"id": device_id}},
    )
    return _parse_items(DeviceStatusInfo, items)


async def fetch_odometer_status_data(
    session: Session,
    transport: Transport,
    device_id: str,
    *,
    from_date: datetime | None = None,
) -> list[StatusData]:
    """Fetch odometer diagnostic samples for one device, oldest first.

    Parameters
    ----------
    from_date : datetime or None
        Only samples recorded at or after this instant are returned.
    """
    search: dict[str, Any] = {
        "deviceSearch": {"id": device_id},
        "diagnosticSearch": {"id": DIAGNOSTIC_ODOMETER_ID},
    }
    if from_date is not None:
        search["fromDate"] = format_api_datetime(from_date)

    items = await get_entities("StatusData", session=session, transport=transport, search=search)
    samples = _parse_items(StatusData, items)
    _logger.debug("Odometer samples for %s: %d", device_id, len(samples))
    return samples
