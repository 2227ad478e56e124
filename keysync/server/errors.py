"""Custom exception types for the server."""
from typing import Optional, Any


class KeySyncHTTPError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NoCycleYetError(KeySyncHTTPError):
    status_code = 404
    error_code = "NO_CYCLE_YET"

    def __init__(self, message: str = "No reconciliation cycle has finished yet") -> None:
        super().__init__(message)


class CycleInFlightError(KeySyncHTTPError):
    status_code = 409
    error_code = "CYCLE_IN_FLIGHT"

    def __init__(self, message: str = "A reconciliation cycle is already running") -> None:
        super().__init__(message)


class CycleFailedError(KeySyncHTTPError):
    status_code = 500
    error_code = "CYCLE_FAILED"
