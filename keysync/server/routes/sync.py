"""GET /sync/last and POST /sync endpoint handlers."""
import logging
from fastapi import APIRouter, status
from keysync.server.errors import CycleFailedError, CycleInFlightError, NoCycleYetError
from keysync.server.models.responses import CycleReportResponse
from keysync.sync.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


def create_sync_router(scheduler: SyncScheduler) -> APIRouter:
    """Create sync router with injected dependencies."""
    router = APIRouter(prefix="/sync", tags=["sync"])

    @router.get("/last", response_model=CycleReportResponse, status_code=status.HTTP_200_OK)
    async def last_cycle() -> CycleReportResponse:
        """Return the report of the most recently finished cycle."""
        report = scheduler.last_report
        if report is None:
            raise NoCycleYetError()
        return CycleReportResponse.model_validate(report.summary())

    @router.post("", response_model=CycleReportResponse, status_code=status.HTTP_200_OK)
    async def trigger_cycle() -> CycleReportResponse:
        """Run one cycle now, sharing the scheduler's single-flight guard."""
        if scheduler.in_flight:
            raise CycleInFlightError()
        try:
            report = await scheduler.run_cycle()
        except Exception as e:
            logger.exception("Manually triggered cycle failed")
            raise CycleFailedError(f"Cycle failed: {e}") from e
        if report is None:
            raise CycleInFlightError()
        return CycleReportResponse.model_validate(report.summary())

    return router
