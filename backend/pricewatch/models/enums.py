"""Enumerated values stored as plain strings."""

from enum import Enum


class Platform(str, Enum):
    """Storefront a tracked URL belongs to."""

    AMAZON = "amazon"
    FLIPKART = "flipkart"
    WALMART = "walmart"
    ALIEXPRESS = "aliexpress"
    OTHER = "other"


class EventKind(str, Enum):
    """Kinds of notification raised for an owner."""

    PRICE_DROP = "price_drop"
    BACK_IN_STOCK = "back_in_stock"
    TARGET_REACHED = "target_reached"
    SCRAPING_ERROR = "scraping_error"


class ExtractionStatus(str, Enum):
    """Outcome of a single extraction attempt."""

    SUCCESS = "success"
    FAILED = "failed"
    RATE_LIMITED = "rate_limited"
    BLOCKED = "blocked"
