"""Notification Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Notification response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    item_id: Optional[UUID] = None
    kind: str
    title: str
    message: str
    old_price: Optional[Decimal] = None
    new_price: Optional[Decimal] = None
    is_read: bool
    created_at: datetime
