"""FastAPI application factory."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from keysync._version import __version__
from keysync.config import SyncConfig, load_config_from_env
from keysync.server.errors import KeySyncHTTPError
from keysync.server.middleware.logging import RequestLoggingMiddleware
from keysync.server.models.responses import ErrorResponse, ErrorDetail
from keysync.server.routes.health import create_health_router
from keysync.server.routes.sync import create_sync_router
from keysync.sync.builder import cycle_factory
from keysync.sync.scheduler import SyncScheduler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def create_app(
    config: Optional[SyncConfig] = None,
    scheduler: Optional[SyncScheduler] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    When called without arguments (e.g. via uvicorn --factory), loads
    configuration from environment variables. The scheduler runs as a
    background task for the lifetime of the app unless ``start_scheduler``
    is False.
    """
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    # basicConfig is a no-op once the CLI has configured logging
    root = logging.getLogger()
    if root.getEffectiveLevel() > logging.INFO:
        root.setLevel(logging.INFO)
    if config is None:
        config = load_config_from_env()
    if scheduler is None:
        scheduler = SyncScheduler(cycle_factory(config), interval=config.interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "keysync %s (%s): %s -> %s",
            __version__, config.env, config.web3signer_api_url, config.eth2_client_api_url,
        )
        if start_scheduler:
            scheduler.start()
        else:
            logger.info("Scheduler disabled, cycles run only on POST /sync")
        yield
        await scheduler.stop()

    app = FastAPI(
        title="keysync",
        description="Keeps validator client remote keys in sync with a remote signer",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.scheduler = scheduler
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(KeySyncHTTPError, _keysync_error_handler)
    app.include_router(create_health_router(config, scheduler))
    app.include_router(create_sync_router(scheduler))
    return app


async def _keysync_error_handler(request: Request, exc: KeySyncHTTPError) -> JSONResponse:
    response = ErrorResponse(error=ErrorDetail(code=exc.error_code, message=exc.message, details=exc.details))
    return JSONResponse(status_code=exc.status_code, content=response.model_dump())
