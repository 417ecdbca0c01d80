"""Notification API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.dependencies import get_current_owner, get_db
from pricewatch.schemas.common import ApiResponse, ListMeta
from pricewatch.schemas.notification import NotificationResponse
from pricewatch.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = False,
    owner_id: UUID = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
):
    """Get notifications for the current owner, newest first."""
    service = NotificationService(db)
    notifications = await service.list_notifications(owner_id, limit=limit, unread_only=unread_only)

    return ApiResponse(
        status="success",
        data=[NotificationResponse.model_validate(n).model_dump(mode="json") for n in notifications],
        meta=ListMeta(count=len(notifications), limit=limit),
    )


@router.post("/mark-all-read", response_model=ApiResponse)
async def mark_all_read(
    owner_id: UUID = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    updated = await service.mark_all_read(owner_id)
    return ApiResponse(status="success", data={"updated": updated})


@router.patch("/{notification_id}/read", response_model=ApiResponse)
async def mark_read(
    notification_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    notification = await service.mark_read(notification_id, owner_id)
    return ApiResponse(
        status="success",
        data=NotificationResponse.model_validate(notification).model_dump(mode="json"),
    )


@router.delete("/{notification_id}", response_model=ApiResponse)
async def delete_notification(
    notification_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db),
):
    service = NotificationService(db)
    await service.delete_notification(notification_id, owner_id)
    return ApiResponse(status="success", data={"deleted": True})
