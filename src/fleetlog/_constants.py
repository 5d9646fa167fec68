"""Internal constants shared across the library."""

DEFAULT_SERVER = "my.geotab.com"
API_PATH = "/apiv1"
USER_AGENT = "fleetlog/1"

#: ``path`` value returned by ``Authenticate`` when no redirect is needed.
THIS_SERVER = "ThisServer"

#: Exception type names the API reports inside JSON-RPC ``error`` objects.
INVALID_USER_ERRORS: frozenset[str] = frozenset({"InvalidUserException"})
DB_UNAVAILABLE_ERRORS: frozenset[str] = frozenset({"DbUnavailableException"})

DIAGNOSTIC_ODOMETER_ID = "DiagnosticOdometerAdjustmentId"

DEFAULT_POLL_INTERVAL = 20.0
DEFAULT_BACKUP_DIR = "VehiclesInfoBackup"

# ------------------------------------------------------------------
# Distance conversion
# ------------------------------------------------------------------

_MILES_PER_KM = 0.621371192


def km_to_miles(km: float) -> float:
    """Convert kilometres to statute miles."""
    return km * _MILES_PER_KM
