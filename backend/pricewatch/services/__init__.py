"""Services module for business logic and data operations.

This module contains the change evaluator, the catalog store used by the
tracking engine, and the owner-facing item and notification services.
"""

from pricewatch.services.change_evaluator import DomainEvent, Evaluation, ItemState, evaluate
from pricewatch.services.catalog_store import CatalogStore
from pricewatch.services.item_service import ItemService
from pricewatch.services.notification_service import NotificationService

__all__ = [
    "DomainEvent",
    "Evaluation",
    "ItemState",
    "evaluate",
    "CatalogStore",
    "ItemService",
    "NotificationService",
]
