"""TrackedItem model: one owner's subscription to a product URL."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text, Boolean, Integer, Numeric, DateTime, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from pricewatch.models.enums import Platform

if TYPE_CHECKING:
    from pricewatch.models.price_observation import PriceObservation


class TrackedItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A product page an owner wants price updates for.

    Price fields are written only by the tracking pipeline. Owner edits
    touch target_price and check_frequency_hours, never the price fields.
    """

    __tablename__ = "tracked_items"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True,
        comment="Owner identifier handed in by the identity layer"
    )

    # Source
    url: Mapped[str] = mapped_column(Text, nullable=False)
    platform: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Platform.OTHER.value,
        comment="amazon, flipkart, walmart, aliexpress or other"
    )
    external_id: Mapped[str] = mapped_column(
        Text, nullable=False,
        comment="Platform product id, or the URL when none can be derived"
    )

    # Display
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Pricing
    current_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(
        String(5), nullable=False,
        comment="Set from the first successful extraction"
    )
    target_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    lowest_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    highest_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Stock / schedule
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    last_checked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    check_frequency_hours: Mapped[int] = mapped_column(
        Integer, nullable=False, default=24,
        comment="Minimum hours between two scheduled checks"
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "url", name="uq_tracked_items_owner_url"),
    )

    observations: Mapped[List["PriceObservation"]] = relationship(
        back_populates="item", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<TrackedItem(id={self.id}, platform='{self.platform}', current_price={self.current_price})>"
