"""Notification service for owner inboxes."""

import uuid
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.core.exceptions import NotFoundError
from pricewatch.models.notification import Notification


class NotificationService:
    """Read and acknowledge the notifications of one owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notifications(
        self,
        owner_id: uuid.UUID,
        limit: int = 50,
        unread_only: bool = False,
    ) -> List[Notification]:
        """Get notifications for an owner, newest first."""
        stmt = select(Notification).where(Notification.owner_id == owner_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get(self, notification_id: uuid.UUID, owner_id: uuid.UUID) -> Notification:
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.owner_id == owner_id,
        )
        result = await self.db.execute(stmt)
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification", str(notification_id))
        return notification

    async def mark_read(self, notification_id: uuid.UUID, owner_id: uuid.UUID) -> Notification:
        notification = await self._get(notification_id, owner_id)
        notification.is_read = True
        await self.db.flush()
        return notification

    async def mark_all_read(self, owner_id: uuid.UUID) -> int:
        """Mark every unread notification of an owner as read.

        Returns:
            Number of notifications updated
        """
        result = await self.db.execute(
            update(Notification)
            .where(Notification.owner_id == owner_id, Notification.is_read == False)
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def delete_notification(self, notification_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        notification = await self._get(notification_id, owner_id)
        await self.db.delete(notification)
        await self.db.flush()
