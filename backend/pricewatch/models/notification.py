"""Notification model: persisted price/stock events for an owner."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, Numeric, Boolean, DateTime, Uuid, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from pricewatch.models.base import Base, UUIDPrimaryKeyMixin


class Notification(UUIDPrimaryKeyMixin, Base):
    """An event raised for an owner.

    Only ``is_read`` changes after insert.
    """

    __tablename__ = "notifications"

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("tracked_items.id", ondelete="CASCADE"),
        nullable=True,
        comment="Empty for failures while adding an item"
    )

    kind: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="price_drop, back_in_stock, target_reached, scraping_error"
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    old_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    new_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index("idx_notifications_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, kind='{self.kind}', is_read={self.is_read})>"
