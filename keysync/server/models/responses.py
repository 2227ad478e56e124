"""Response models for API endpoints."""
from typing import Annotated, Literal, Optional, Any
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: Annotated[str, Field()]
    message: Annotated[str, Field()]
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: Annotated[Literal["healthy", "degraded"], Field()]
    mode: Annotated[Literal["production", "development"], Field()]
    interval_seconds: Annotated[float, Field()]
    scheduler_running: Annotated[bool, Field()]
    cycle_in_flight: Annotated[bool, Field()]
    timestamp: Annotated[str, Field()]
    last_cycle_state: Optional[str] = None
    message: Optional[str] = None


class FetchedCounts(BaseModel):
    custodian: int
    client: int


class KeyOutcome(BaseModel):
    operation: Literal["import", "delete"]
    pubkey: str
    succeeded: bool
    status: str
    message: str


class CycleReportResponse(BaseModel):
    state: Annotated[str, Field()]
    dry_run: bool
    started_at: str
    finished_at: str
    duration_seconds: float
    fetched: FetchedCounts
    to_add: list[str]
    to_remove: list[str]
    added: int
    removed: int
    failed: int
    failed_batches: int
    wipe_blocked: bool
    errors: dict[str, str]
    outcomes: list[KeyOutcome]
