"""Price history for tracked items."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, ForeignKey, Numeric, Boolean, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from pricewatch.models.tracked_item import TrackedItem


class PriceObservation(UUIDPrimaryKeyMixin, Base):
    """One immutable price reading for a tracked item.

    Append-only. Rows disappear only when their item is deleted.
    """

    __tablename__ = "price_observations"

    item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tracked_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(5), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_price_observations_item_observed", "item_id", "observed_at"),
    )

    item: Mapped["TrackedItem"] = relationship(back_populates="observations")

    def __repr__(self) -> str:
        return f"<PriceObservation(item_id={self.item_id}, price={self.price}, observed_at={self.observed_at})>"
