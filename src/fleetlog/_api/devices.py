"""Device list endpoint: ``Get`` with ``typeName=Device``."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from fleetlog._api._common import get_entities
from fleetlog._transport import Transport
from fleetlog.models.device import Device
from fleetlog.session import Session

_logger = logging.getLogger(__name__)


async def fetch_devices(session: Session, transport: Transport) -> list[Device]:
    """Fetch all devices visible to the authenticated user.

    Items that fail validation are logged and dropped rather than
    failing the whole listing.
    """
    items = await get_entities("Device", session=session, transport=transport)
    devices: list[Device] = []
    for item in items:
        try:
            devices.append(Device.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping unparseable device item %s", item.get("id"), exc_info=True)
    return devices
