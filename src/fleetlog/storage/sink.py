"""Append-only per-entity reading log.

Each entity gets one file named after its id inside the backup
directory.  Every :meth:`ReadingSink.append` call opens the file in
append mode, writes exactly one CSV line and closes it again, so
concurrent workers writing different entities never share a handle and
a crash loses at most the line being written.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from datetime import UTC
from pathlib import Path

from fleetlog.exceptions import SinkWriteError
from fleetlog.models.reading import Reading

_logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

#: Column order of every persisted line.
FIELDS: tuple[str, ...] = ("id", "name", "vin", "timestamp", "odometer", "latitude", "longitude")


def safe_file_name(entity_id: str) -> str:
    """Map an entity id to a file name that cannot escape the backup directory."""
    name = _UNSAFE_CHARS.sub("_", entity_id.strip())
    if not name or name in {".", ".."}:
        raise SinkWriteError(f"entity id {entity_id!r} cannot be used as a file name", entity_id=entity_id)
    return name


class ReadingSink:
    """Durable append-only store for readings.

    Parameters
    ----------
    directory : str or Path
        Backup directory; created on first append.
    local_time : bool
        Serialize timestamps in local time instead of UTC.
    """

    def __init__(self, directory: str | Path, *, local_time: bool = False) -> None:
        self._directory = Path(directory)
        self._local_time = local_time

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, entity_id: str) -> Path:
        return self._directory / safe_file_name(entity_id)

    def format_line(self, reading: Reading) -> str:
        """Serialize *reading* as one CSV line (including the newline)."""
        timestamp = ""
        if reading.timestamp is not None:
            ts = reading.timestamp
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=UTC)
            ts = ts.astimezone() if self._local_time else ts.astimezone(UTC)
            timestamp = ts.isoformat()

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            [
                reading.entity_id,
                reading.name,
                reading.vin or "",
                timestamp,
                reading.odometer,
                reading.latitude,
                reading.longitude,
            ]
        )
        return buffer.getvalue()

    def append(self, entity_id: str, reading: Reading) -> None:
        """Append *reading* to the log of *entity_id*.

        Raises
        ------
        SinkWriteError
            If the directory cannot be created or the line cannot be written.
        """
        path = self.path_for(entity_id)
        line = self.format_line(reading)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(line)
        except OSError as exc:
            raise SinkWriteError(f"Writing reading for {entity_id} to {path} failed: {exc}", entity_id=entity_id) from exc
        _logger.debug("Appended reading for %s to %s", entity_id, path)

    def read_lines(self, entity_id: str) -> list[list[str]]:
        """Return the parsed rows stored for *entity_id* (empty if none)."""
        path = self.path_for(entity_id)
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8", newline="") as handle:
            return [row for row in csv.reader(handle) if row]
