"""fleetlog - Concurrent fleet telemetry poller with per-vehicle append-only logs."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetlog")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetlog.client import FleetClient
from fleetlog.config import FleetlogConfig
from fleetlog.exceptions import (
    FleetlogApiError,
    FleetlogAuthenticationError,
    FleetlogConfigError,
    FleetlogDatabaseUnavailableError,
    FleetlogError,
    FleetlogNotFoundError,
    FleetlogSessionExpiredError,
    FleetlogTransportError,
    SinkWriteError,
    WorkerSpawnError,
)
from fleetlog.ingestion.transform import transform_snapshot
from fleetlog.models import (
    Device,
    DeviceStatusInfo,
    RawSnapshot,
    Reading,
    StatusData,
    UnitSystem,
)
from fleetlog.polling import (
    CancellationSignal,
    OperatorStopListener,
    PollWorker,
    RemoteDataSource,
    RunResult,
    Supervisor,
    WorkerState,
    WorkerStats,
)
from fleetlog.storage import ReadingSink

__all__ = [
    "__version__",
    "CancellationSignal",
    "Device",
    "DeviceStatusInfo",
    "FleetClient",
    "FleetlogApiError",
    "FleetlogAuthenticationError",
    "FleetlogConfig",
    "FleetlogConfigError",
    "FleetlogDatabaseUnavailableError",
    "FleetlogError",
    "FleetlogNotFoundError",
    "FleetlogSessionExpiredError",
    "FleetlogTransportError",
    "OperatorStopListener",
    "PollWorker",
    "RawSnapshot",
    "Reading",
    "ReadingSink",
    "RemoteDataSource",
    "RunResult",
    "SinkWriteError",
    "StatusData",
    "Supervisor",
    "UnitSystem",
    "WorkerSpawnError",
    "WorkerState",
    "WorkerStats",
    "transform_snapshot",
]
