"""API response models."""
from keysync.server.models.responses import (
    CycleReportResponse, ErrorDetail, ErrorResponse, FetchedCounts, HealthResponse, KeyOutcome,
)

__all__ = [
    "CycleReportResponse", "ErrorDetail", "ErrorResponse", "FetchedCounts", "HealthResponse", "KeyOutcome",
]
