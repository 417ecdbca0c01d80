"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from pricewatch.api.v1 import health, items, notifications

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(items.router, prefix="/items", tags=["items"])
api_v1_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
