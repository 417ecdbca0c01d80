"""Per-item tracking pipeline.

This service connects extraction with the catalog store. The scheduled
cycle and the manual refresh route both go through ``check_item``, so an
item is processed the same way no matter who triggered the check:
extract → evaluate → patch item → append observation → insert events →
write the audit record.
"""

import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from pricewatch.core.exceptions import ExtractionError
from pricewatch.models.enums import ExtractionStatus
from pricewatch.models.tracked_item import TrackedItem
from pricewatch.scrapers.base import Snapshot
from pricewatch.scrapers.registry import StrategyRegistry, get_strategy_registry
from pricewatch.services.catalog_store import CatalogStore
from pricewatch.services.change_evaluator import DomainEvent, ItemState, evaluate

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingService:
    """Runs one check for one tracked item."""

    def __init__(
        self,
        store: CatalogStore,
        registry: Optional[StrategyRegistry] = None,
        drop_threshold_pct: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize tracking service.

        Args:
            store: Catalog store for all reads and writes
            registry: Strategy registry; the global one when None
            drop_threshold_pct: Override for the price drop threshold
            clock: Source of check timestamps
        """
        self.store = store
        self.registry = registry or get_strategy_registry()
        self.drop_threshold_pct = drop_threshold_pct
        self.clock = clock
        self.logger = logger.bind(service="tracking_service")

    async def extract(self, url: str) -> Snapshot:
        """Select the strategy for ``url`` and extract a snapshot."""
        strategy = self.registry.select(url)
        return await strategy.extract(url)

    async def check_item(self, item: TrackedItem) -> List[DomainEvent]:
        """Check one item and persist the outcome.

        Every attempt leaves an extraction log row. On failure the row
        carries the extraction error's status (or 'failed') and the error
        is re-raised for the caller to contain or surface.

        Args:
            item: Tracked item as currently stored

        Returns:
            Events emitted by this check

        Raises:
            ExtractionError: Page could not be read
            PersistenceError: Store write failed
        """
        log = self.logger.bind(item_id=str(item.id), url=item.url)
        started = time.monotonic()

        try:
            snapshot = await self.extract(item.url)
            evaluation = evaluate(
                ItemState.from_item(item),
                snapshot,
                self.clock(),
                drop_threshold_pct=self.drop_threshold_pct,
            )

            await self.store.update_item(item.id, evaluation.patch)

            if snapshot.price is not None:
                await self.store.insert_observation({
                    "item_id": item.id,
                    "price": snapshot.price,
                    "currency": snapshot.currency or item.currency,
                    "is_available": snapshot.is_available,
                })

            for event in evaluation.events:
                await self.store.insert_event({
                    "owner_id": item.owner_id,
                    "item_id": item.id,
                    "kind": event.kind.value,
                    "title": event.title,
                    "message": event.message,
                    "old_price": event.old_price,
                    "new_price": event.new_price,
                })
                log.info("event_emitted", kind=event.kind.value)

        except Exception as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            status = e.status if isinstance(e, ExtractionError) else ExtractionStatus.FAILED.value
            log.warning("item_check_failed", status=status, error=str(e), duration_ms=duration_ms)
            await self.store.insert_audit_log({
                "item_id": item.id,
                "status": status,
                "error_message": str(e),
                "duration_ms": duration_ms,
            })
            raise

        duration_ms = int((time.monotonic() - started) * 1000)
        await self.store.insert_audit_log({
            "item_id": item.id,
            "status": ExtractionStatus.SUCCESS.value,
            "duration_ms": duration_ms,
        })

        log.info(
            "item_checked",
            price=str(snapshot.price) if snapshot.price is not None else None,
            is_available=snapshot.is_available,
            events=len(evaluation.events),
            duration_ms=duration_ms,
        )
        return evaluation.events
