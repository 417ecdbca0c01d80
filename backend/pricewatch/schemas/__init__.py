"""Pydantic schemas for the PriceWatch API.

All request/response models are defined here for easy import.
"""

from pricewatch.schemas.common import ApiResponse, ErrorDetail, ErrorResponse, ListMeta
from pricewatch.schemas.item import (
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    PriceHistoryPoint,
)
from pricewatch.schemas.notification import NotificationResponse
from pricewatch.schemas.health import HealthCheckResponse

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "ListMeta",
    # Items
    "ItemCreateRequest",
    "ItemResponse",
    "ItemUpdateRequest",
    "PriceHistoryPoint",
    # Notifications
    "NotificationResponse",
    # Health
    "HealthCheckResponse",
]
