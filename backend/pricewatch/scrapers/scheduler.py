"""APScheduler-based tracking scheduler.

This module runs the periodic tracking cycle. Each cycle loads the
catalog, keeps the items whose check interval has elapsed and checks them
one at a time through the TrackingService, with a fixed pause between
items. A failing item is logged and skipped; the cycle always continues.
"""

import asyncio
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pricewatch.models.tracked_item import TrackedItem
from pricewatch.scrapers.tracking_service import TrackingService
from pricewatch.services.catalog_store import CatalogStore

logger = structlog.get_logger(__name__)

CYCLE_JOB_ID = "tracking_cycle"


@dataclass
class CycleResult:
    """Summary of one tracking cycle."""

    total: int = 0
    due: int = 0
    succeeded: int = 0
    failed: int = 0


def is_due(item: TrackedItem, now: datetime) -> bool:
    """Whether ``item`` should be checked at ``now``.

    Never-checked items are always due. Naive timestamps (SQLite drops
    tzinfo) are read as UTC.
    """
    last_checked = item.last_checked_at
    if last_checked is None:
        return True
    if last_checked.tzinfo is None:
        last_checked = last_checked.replace(tzinfo=timezone.utc)

    hours_since = (now - last_checked).total_seconds() / 3600
    return hours_since >= item.check_frequency_hours


class TrackingScheduler:
    """Drives tracking cycles on a fixed interval.

    Lifecycle:
    - ``start()`` registers the interval job and runs the first cycle immediately
    - ``stop()`` removes the timer; a cycle already running finishes on its own
    - ``run_cycle()`` can also be called directly (CLI, tests)

    Only one cycle runs at a time. A call that arrives while a cycle is in
    progress returns None without touching the store.
    """

    def __init__(
        self,
        store: CatalogStore,
        tracking_service: TrackingService,
        interval_minutes: int = 60,
        item_delay_seconds: float = 2.0,
        include_out_of_stock: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize tracking scheduler.

        Args:
            store: Catalog store to read items from
            tracking_service: Pipeline that checks one item
            interval_minutes: Minutes between cycle starts
            item_delay_seconds: Pause between two items within a cycle
            include_out_of_stock: Also re-check items marked unavailable
            clock: Source of "now" for the due filter
        """
        self.store = store
        self.tracking_service = tracking_service
        self.interval_minutes = interval_minutes
        self.item_delay_seconds = item_delay_seconds
        self.include_out_of_stock = include_out_of_stock
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.scheduler: Optional[AsyncIOScheduler] = None
        self.last_result: Optional[CycleResult] = None
        self.last_cycle_at: Optional[datetime] = None
        self._running = False
        self.logger = logger.bind(service="tracking_scheduler")

    @property
    def is_running(self) -> bool:
        """True while a cycle is in progress."""
        return self._running

    @property
    def is_started(self) -> bool:
        """True while the interval timer is active."""
        return self.scheduler is not None and self.scheduler.running

    def start(self) -> None:
        """Start the interval timer. Must be called from a running event loop."""
        if self.is_started:
            self.logger.warning("scheduler_already_running")
            return

        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.scheduler.add_job(
            func=self._run_cycle_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes, timezone="UTC"),
            id=CYCLE_JOB_ID,
            name="Tracking cycle",
            replace_existing=True,
            max_instances=1,  # Overlapping fires are skipped, never queued
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self.scheduler.start()
        self.logger.info("scheduler_started", interval_minutes=self.interval_minutes)

    def stop(self) -> None:
        """Stop the interval timer without waiting for an in-flight cycle."""
        if not self.is_started:
            self.logger.warning("scheduler_not_running")
            return

        self.scheduler.shutdown(wait=False)
        self.scheduler = None
        self.logger.info("scheduler_stopped", cycle_in_progress=self._running)

    async def _run_cycle_job(self) -> None:
        """Entry point for APScheduler.

        Catches everything so a failed cycle never kills the timer.
        """
        try:
            await self.run_cycle()
        except Exception as e:
            self.logger.error("tracking_cycle_failed", error=str(e), exc_info=True)

    async def run_cycle(self) -> Optional[CycleResult]:
        """Run one tracking cycle.

        Returns:
            CycleResult, or None if a cycle was already running

        Raises:
            PersistenceError: If the item list cannot be loaded
        """
        # Check-and-set with no await in between
        if self._running:
            self.logger.info("cycle_already_running")
            return None
        self._running = True

        try:
            items = await self.store.list_available_items(
                include_out_of_stock=self.include_out_of_stock
            )
            now = self.clock()
            due_items = [item for item in items if is_due(item, now)]

            result = CycleResult(total=len(items), due=len(due_items))
            self.logger.info("cycle_started", total=result.total, due=result.due)

            for index, item in enumerate(due_items):
                if index > 0 and self.item_delay_seconds > 0:
                    await asyncio.sleep(self.item_delay_seconds)

                try:
                    await self.tracking_service.check_item(item)
                    result.succeeded += 1
                except Exception as e:
                    result.failed += 1
                    self.logger.error(
                        "item_check_contained",
                        item_id=str(item.id),
                        url=item.url,
                        error_type=type(e).__name__,
                        error=str(e),
                    )

            self.last_result = result
            self.last_cycle_at = now
            self.logger.info("cycle_completed", **asdict(result))
            return result
        finally:
            self._running = False

    def status(self) -> dict:
        """Report timer and cycle state for health checks."""
        next_run = None
        if self.is_started:
            job = self.scheduler.get_job(CYCLE_JOB_ID)
            if job and job.next_run_time:
                next_run = job.next_run_time.isoformat()

        return {
            "started": self.is_started,
            "cycle_running": self._running,
            "interval_minutes": self.interval_minutes,
            "next_run": next_run,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None,
            "last_result": asdict(self.last_result) if self.last_result else None,
        }
