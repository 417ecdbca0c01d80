"""SQLAlchemy models for PriceWatch.

All models are imported here so metadata.create_all sees every table.
"""

from pricewatch.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from pricewatch.models.enums import Platform, EventKind, ExtractionStatus
from pricewatch.models.tracked_item import TrackedItem
from pricewatch.models.price_observation import PriceObservation
from pricewatch.models.notification import Notification
from pricewatch.models.extraction_log import ExtractionLog

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Platform",
    "EventKind",
    "ExtractionStatus",
    "TrackedItem",
    "PriceObservation",
    "Notification",
    "ExtractionLog",
]
