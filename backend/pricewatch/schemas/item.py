"""Tracked item Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ItemCreateRequest(BaseModel):
    """Request to start tracking a product URL.

    The URL is checked by the service so a blank or non-http(s) value
    gets the same 400 as every other validation failure.
    """

    url: Optional[str] = None
    target_price: Optional[Decimal] = Field(default=None, ge=0)
    check_frequency_hours: Optional[int] = Field(default=None, ge=1, le=24 * 30)


class ItemUpdateRequest(BaseModel):
    """Owner edits. Price fields are never editable."""

    target_price: Optional[Decimal] = Field(default=None, ge=0)
    check_frequency_hours: Optional[int] = Field(default=None, ge=1, le=24 * 30)


class ItemResponse(BaseModel):
    """Tracked item response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    platform: str
    external_id: str
    title: str
    image_url: Optional[str] = None
    current_price: Optional[Decimal] = None
    currency: str
    target_price: Optional[Decimal] = None
    lowest_price: Optional[Decimal] = None
    highest_price: Optional[Decimal] = None
    is_available: bool
    last_checked_at: Optional[datetime] = None
    check_frequency_hours: int
    created_at: datetime
    updated_at: datetime


class PriceHistoryPoint(BaseModel):
    """Single price observation."""

    model_config = ConfigDict(from_attributes=True)

    price: Decimal
    currency: str
    is_available: bool
    observed_at: datetime
