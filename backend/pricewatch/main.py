"""PriceWatch Backend -- FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pricewatch.api.v1.router import api_v1_router
from pricewatch.config import settings
from pricewatch.core.exceptions import (
    ExtractionError,
    NotFoundError,
    PersistenceError,
    PriceWatchException,
    ValidationError,
)
from pricewatch.core.logging import configure_logging
from pricewatch.db.session import async_session_factory, engine
from pricewatch.db.utils import create_tables
from pricewatch.schemas.common import ErrorDetail, ErrorResponse
from pricewatch.scrapers.scheduler import TrackingScheduler
from pricewatch.scrapers.tracking_service import TrackingService
from pricewatch.scrapers.utils.browser_manager import get_browser_manager
from pricewatch.services.catalog_store import CatalogStore

logger = structlog.get_logger(__name__)


def build_scheduler() -> TrackingScheduler:
    """Wire the tracking scheduler from settings."""
    store = CatalogStore(async_session_factory)
    tracking_service = TrackingService(store, drop_threshold_pct=settings.PRICE_DROP_THRESHOLD_PCT)
    return TrackingScheduler(
        store,
        tracking_service,
        interval_minutes=settings.POLL_INTERVAL_MINUTES,
        item_delay_seconds=settings.ITEM_DELAY_SECONDS,
        include_out_of_stock=settings.RECHECK_OUT_OF_STOCK,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    configure_logging()

    # Startup
    logger.info(
        "app_starting",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
    )

    try:
        await create_tables(engine)
        logger.info("database_tables_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), exc_info=True)

    app.state.scheduler = None
    if settings.scheduler_active:
        app.state.scheduler = build_scheduler()
        app.state.scheduler.start()
    else:
        logger.info("scheduler_disabled", environment=settings.ENVIRONMENT)

    yield

    # Shutdown
    logger.info("app_stopping")

    if app.state.scheduler:
        app.state.scheduler.stop()

    # Closes Playwright
    try:
        await get_browser_manager().stop()
    except Exception as e:
        logger.warning("browser_stop_failed", error=str(e))


app = FastAPI(
    title="PriceWatch API",
    description="Product price tracking and alerting API",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_ERROR_STATUS = {
    ValidationError: (400, "validation_error"),
    NotFoundError: (404, "not_found"),
    ExtractionError: (502, "extraction_failed"),
    PersistenceError: (503, "persistence_error"),
}


@app.exception_handler(PriceWatchException)
async def pricewatch_exception_handler(request: Request, exc: PriceWatchException):
    """Render domain errors in the standard error envelope."""
    status_code, code = next(
        (mapping for exc_type, mapping in _ERROR_STATUS.items() if isinstance(exc, exc_type)),
        (500, "internal_error"),
    )
    if status_code >= 500:
        logger.warning("request_failed", path=request.url.path, code=code, error=exc.message)

    body = ErrorResponse(
        error=ErrorDetail(code=code, message=exc.message, field=getattr(exc, "field", None))
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "PriceWatch API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
    }
