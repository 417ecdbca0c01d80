"""Health check endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.dependencies import get_db, get_scheduler
from pricewatch.schemas import HealthCheckResponse
from pricewatch.scrapers.scheduler import TrackingScheduler

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    scheduler: Optional[TrackingScheduler] = Depends(get_scheduler),
):
    """Return service health status.

    Checks database connectivity and reports the tracking scheduler state.
    Status is "degraded" when the database does not answer.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return HealthCheckResponse(
        status="ok" if db_status == "ok" else "degraded",
        database=db_status,
        scheduler=scheduler.status() if scheduler else None,
    )
