"""Audit trail of extraction attempts."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from pricewatch.models.base import Base, UUIDPrimaryKeyMixin


class ExtractionLog(UUIDPrimaryKeyMixin, Base):
    """Records the outcome of every extraction attempt.

    Written for diagnostics only; nothing reads these rows back into
    tracking decisions.
    """

    __tablename__ = "extraction_logs"

    item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("tracked_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Empty when the attempt was for an item being added"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Status: 'success', 'failed', 'rate_limited', 'blocked'"
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Wall-clock time of the attempt in milliseconds"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<ExtractionLog(id={self.id}, item_id={self.item_id}, status='{self.status}')>"
