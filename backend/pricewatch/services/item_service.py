"""Tracked item service for the request layer.

Handles owner-scoped CRUD, the synchronous first extraction when an item
is added, manual refresh and price history queries.
"""

import time
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from urllib.parse import urlparse

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.config import settings
from pricewatch.core.exceptions import ExtractionError, NotFoundError, ValidationError
from pricewatch.models.enums import EventKind, ExtractionStatus
from pricewatch.models.extraction_log import ExtractionLog
from pricewatch.models.notification import Notification
from pricewatch.models.price_observation import PriceObservation
from pricewatch.models.tracked_item import TrackedItem
from pricewatch.scrapers.registry import classify
from pricewatch.services.catalog_store import CatalogStore

if TYPE_CHECKING:
    from pricewatch.scrapers.tracking_service import TrackingService

logger = structlog.get_logger(__name__)


def validate_url(url: Optional[str]) -> str:
    """Return the stripped URL, or raise ValidationError for anything not http(s)."""
    url = (url or "").strip()
    if not url:
        raise ValidationError("url", "URL is required")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("url", "must be an absolute http(s) URL")
    return url


class ItemService:
    """Owner-scoped operations on tracked items.

    Reads and owner edits go through the request session. Failure records
    written while adding an item go through the catalog store, which
    commits on its own, so they survive the request rollback.
    """

    def __init__(
        self,
        db: AsyncSession,
        store: CatalogStore,
        tracking_service: "TrackingService",
    ):
        self.db = db
        self.store = store
        self.tracking_service = tracking_service
        self.logger = logger.bind(service="item_service")

    async def list_items(self, owner_id: uuid.UUID) -> List[TrackedItem]:
        """Get all items of an owner, newest first."""
        stmt = (
            select(TrackedItem)
            .where(TrackedItem.owner_id == owner_id)
            .order_by(TrackedItem.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_item(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> TrackedItem:
        stmt = select(TrackedItem).where(
            TrackedItem.id == item_id,
            TrackedItem.owner_id == owner_id,
        )
        result = await self.db.execute(stmt)
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError("TrackedItem", str(item_id))
        return item

    async def create_item(
        self,
        owner_id: uuid.UUID,
        url: Optional[str],
        target_price: Optional[Decimal] = None,
        check_frequency_hours: Optional[int] = None,
    ) -> TrackedItem:
        """Add an item after a successful first extraction.

        Raises:
            ValidationError: Bad URL or the owner already tracks it, including
                when a concurrent request adds it during extraction
            ExtractionError: First extraction failed; a failed audit log
                and a scraping_error notification are recorded first
        """
        url = validate_url(url)

        existing = await self.db.execute(
            select(TrackedItem.id).where(
                TrackedItem.owner_id == owner_id,
                TrackedItem.url == url,
            )
        )
        if existing.scalar_one_or_none():
            raise ValidationError("url", "this product is already being tracked")

        log = self.logger.bind(owner_id=str(owner_id), url=url)
        started = time.monotonic()

        try:
            snapshot = await self.tracking_service.extract(url)
        except ExtractionError as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            log.warning("first_extraction_failed", status=e.status, error=str(e))
            await self.store.insert_audit_log({
                "item_id": None,
                "status": e.status,
                "error_message": str(e),
                "duration_ms": duration_ms,
            })
            await self.store.insert_event({
                "owner_id": owner_id,
                "item_id": None,
                "kind": EventKind.SCRAPING_ERROR.value,
                "title": "Failed to Add Product",
                "message": f"Could not read product details from {url}",
            })
            raise

        duration_ms = int((time.monotonic() - started) * 1000)

        item = TrackedItem(
            owner_id=owner_id,
            url=url,
            platform=classify(url).value,
            external_id=snapshot.external_id,
            title=snapshot.title,
            image_url=snapshot.image_url,
            current_price=snapshot.price,
            lowest_price=snapshot.price,
            highest_price=snapshot.price,
            currency=snapshot.currency or settings.DEFAULT_CURRENCY,
            target_price=target_price,
            is_available=snapshot.is_available,
            last_checked_at=self.tracking_service.clock(),
            check_frequency_hours=check_frequency_hours or settings.DEFAULT_CHECK_FREQUENCY_HOURS,
        )
        self.db.add(item)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Another request added the same URL during extraction
            await self.db.rollback()
            raise ValidationError("url", "this product is already being tracked") from e

        if snapshot.price is not None:
            self.db.add(PriceObservation(
                item_id=item.id,
                price=snapshot.price,
                currency=item.currency,
                is_available=snapshot.is_available,
            ))

        self.db.add(ExtractionLog(
            item_id=item.id,
            status=ExtractionStatus.SUCCESS.value,
            duration_ms=duration_ms,
        ))
        await self.db.flush()
        await self.db.refresh(item)

        log.info("item_created", item_id=str(item.id), platform=item.platform)
        return item

    async def update_item(
        self,
        item_id: uuid.UUID,
        owner_id: uuid.UUID,
        fields: dict,
    ) -> TrackedItem:
        """Apply owner edits. Only target_price and check_frequency_hours are accepted."""
        item = await self.get_item(item_id, owner_id)

        if "target_price" in fields:
            item.target_price = fields["target_price"]
        if fields.get("check_frequency_hours") is not None:
            item.check_frequency_hours = fields["check_frequency_hours"]

        await self.db.flush()
        await self.db.refresh(item)
        return item

    async def delete_item(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        """Delete an item with its history and notifications.

        Audit logs are kept with their item reference cleared.
        """
        item = await self.get_item(item_id, owner_id)

        await self.db.execute(delete(PriceObservation).where(PriceObservation.item_id == item.id))
        await self.db.execute(delete(Notification).where(Notification.item_id == item.id))
        await self.db.execute(
            update(ExtractionLog).where(ExtractionLog.item_id == item.id).values(item_id=None)
        )
        await self.db.execute(delete(TrackedItem).where(TrackedItem.id == item.id))

        self.logger.info("item_deleted", item_id=str(item_id))

    async def refresh_item(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> TrackedItem:
        """Check an item now, through the same pipeline as the scheduled cycle.

        Raises:
            NotFoundError: Item missing or owned by someone else
            ExtractionError: Page could not be read
            PersistenceError: Store write failed
        """
        item = await self.get_item(item_id, owner_id)
        await self.tracking_service.check_item(item)

        # The pipeline committed through its own sessions
        await self.db.refresh(item)
        return item

    async def get_history(
        self,
        item_id: uuid.UUID,
        owner_id: uuid.UUID,
        limit: int = 30,
    ) -> List[PriceObservation]:
        """Get price observations for an item, newest first."""
        await self.get_item(item_id, owner_id)

        stmt = (
            select(PriceObservation)
            .where(PriceObservation.item_id == item_id)
            .order_by(PriceObservation.observed_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
