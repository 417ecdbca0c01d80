"""Catalog store used by the tracking engine.

Each call opens its own session and commits before returning, so every
call is atomic on its own. Callers never share a transaction across
calls. Any SQLAlchemy failure surfaces as PersistenceError.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricewatch.core.exceptions import PersistenceError
from pricewatch.models.extraction_log import ExtractionLog
from pricewatch.models.notification import Notification
from pricewatch.models.price_observation import PriceObservation
from pricewatch.models.tracked_item import TrackedItem

logger = structlog.get_logger(__name__)

# Columns the tracking pipeline may patch. Owner-editable fields and
# currency are never written through update_item.
PATCHABLE_FIELDS = frozenset({
    "current_price",
    "lowest_price",
    "highest_price",
    "is_available",
    "last_checked_at",
    "title",
    "image_url",
})


class CatalogStore:
    """Reads and writes tracked items, observations, events and audit logs."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize catalog store.

        Args:
            session_factory: Async session factory for database access
        """
        self.session_factory = session_factory
        self.logger = logger.bind(service="catalog_store")

    async def list_available_items(self, include_out_of_stock: bool = False) -> List[TrackedItem]:
        """List tracked items for a cycle.

        Args:
            include_out_of_stock: Also return items currently marked unavailable

        Returns:
            Items ordered by last check, never-checked items first
        """
        query = select(TrackedItem).order_by(
            TrackedItem.last_checked_at.is_not(None),
            TrackedItem.last_checked_at,
        )
        if not include_out_of_stock:
            query = query.where(TrackedItem.is_available.is_(True))

        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError("list_available_items", str(e)) from e

    async def get_item(self, item_id: UUID) -> Optional[TrackedItem]:
        try:
            async with self.session_factory() as db:
                return await db.get(TrackedItem, item_id)
        except SQLAlchemyError as e:
            raise PersistenceError("get_item", str(e)) from e

    async def update_item(self, item_id: UUID, patch: Dict[str, Any]) -> TrackedItem:
        """Apply a patch to a tracked item.

        Raises:
            PersistenceError: If the item does not exist, the patch names a
                field outside PATCHABLE_FIELDS, or the write fails
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise PersistenceError("update_item", f"fields not patchable: {sorted(unknown)}")

        try:
            async with self.session_factory() as db:
                item = await db.get(TrackedItem, item_id)
                if item is None:
                    raise PersistenceError("update_item", f"tracked item {item_id} does not exist")

                for name, value in patch.items():
                    setattr(item, name, value)

                await db.commit()
                await db.refresh(item)
                return item
        except SQLAlchemyError as e:
            raise PersistenceError("update_item", str(e)) from e

    async def insert_observation(self, record: Dict[str, Any]) -> PriceObservation:
        return await self._insert("insert_observation", PriceObservation(**record))

    async def insert_event(self, record: Dict[str, Any]) -> Notification:
        return await self._insert("insert_event", Notification(**record))

    async def insert_audit_log(self, record: Dict[str, Any]) -> ExtractionLog:
        return await self._insert("insert_audit_log", ExtractionLog(**record))

    async def _insert(self, operation: str, row):
        try:
            async with self.session_factory() as db:
                db.add(row)
                await db.commit()
                await db.refresh(row)
                return row
        except SQLAlchemyError as e:
            self.logger.error(operation + "_failed", error=str(e))
            raise PersistenceError(operation, str(e)) from e
