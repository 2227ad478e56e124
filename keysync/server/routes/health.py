"""GET /health endpoint handler."""
from datetime import datetime, timezone
from fastapi import APIRouter, status
from keysync.config import SyncConfig
from keysync.server.models.responses import HealthResponse
from keysync.sync.scheduler import SyncScheduler
from keysync.sync.types import CycleState


def create_health_router(config: SyncConfig, scheduler: SyncScheduler) -> APIRouter:
    """Create health router with injected dependencies."""
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK, tags=["status"])
    async def health_check() -> HealthResponse:
        """Report whether the last reconciliation cycle could read both inventories."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
        report = scheduler.last_report
        common = dict(
            mode=config.env, interval_seconds=scheduler.interval, scheduler_running=scheduler.running,
            cycle_in_flight=scheduler.in_flight, timestamp=timestamp,
            last_cycle_state=report.state.value if report else None,
        )
        if report is not None and report.state == CycleState.ABORTED:
            return HealthResponse(status="degraded", message=report.fetch_error, **common)
        return HealthResponse(status="healthy", **common)

    return router
