"""Manual tracking runner for testing and debugging.

Runs one tracking cycle against the configured database, or extracts a
single URL without touching the database.

Usage:
    python scripts/run_cycle.py
    python scripts/run_cycle.py --url "https://www.amazon.in/dp/B0CHX1W1XY"
    python scripts/run_cycle.py --no-delay
"""

import asyncio
import argparse
import sys
import os

# Add backend to path so we can import pricewatch modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from pricewatch.config import settings
from pricewatch.core.exceptions import ExtractionError
from pricewatch.core.logging import configure_logging
from pricewatch.db.session import async_session_factory, engine
from pricewatch.db.utils import create_tables
from pricewatch.scrapers.registry import classify, get_strategy_registry
from pricewatch.scrapers.scheduler import TrackingScheduler
from pricewatch.scrapers.tracking_service import TrackingService
from pricewatch.scrapers.utils.browser_manager import get_browser_manager
from pricewatch.services.catalog_store import CatalogStore


async def extract_url(url: str) -> int:
    """Extract one URL and print the snapshot.

    Returns:
        Process exit code
    """
    strategy = get_strategy_registry().select(url)

    print(f"\n{'='*70}")
    print(f"  Extracting {url}")
    print(f"  Platform: {classify(url).value}  Strategy: {type(strategy).__name__}")
    print(f"{'='*70}\n")

    try:
        snapshot = await strategy.extract(url)
    except ExtractionError as e:
        print(f"❌ {e.message} (status: {e.status})\n")
        return 1

    print(f"  Title:       {snapshot.title}")
    print(f"  Price:       {snapshot.price if snapshot.price is not None else '-'} {snapshot.currency or ''}")
    print(f"  Available:   {'yes' if snapshot.is_available else 'no'}")
    print(f"  External id: {snapshot.external_id}")
    print(f"  Image:       {snapshot.image_url or '-'}\n")
    return 0


async def run_cycle(no_delay: bool = False) -> int:
    """Run one tracking cycle and print the summary."""
    await create_tables(engine)

    store = CatalogStore(async_session_factory)
    scheduler = TrackingScheduler(
        store,
        TrackingService(store, drop_threshold_pct=settings.PRICE_DROP_THRESHOLD_PCT),
        interval_minutes=settings.POLL_INTERVAL_MINUTES,
        item_delay_seconds=0 if no_delay else settings.ITEM_DELAY_SECONDS,
        include_out_of_stock=settings.RECHECK_OUT_OF_STOCK,
    )

    result = await scheduler.run_cycle()

    print(f"\n{'='*70}")
    print(f"  Summary")
    print(f"{'='*70}")
    print(f"  Items:     {result.total}")
    print(f"  Due:       {result.due}")
    print(f"  Succeeded: {result.succeeded}")
    print(f"  Failed:    {result.failed}")
    print(f"{'='*70}\n")
    return 1 if result.failed else 0


async def _main(args) -> int:
    try:
        if args.url:
            return await extract_url(args.url)
        return await run_cycle(no_delay=args.no_delay)
    finally:
        await get_browser_manager().stop()
        await engine.dispose()


def main():
    """Parse arguments and run."""
    parser = argparse.ArgumentParser(
        description="Run a tracking cycle or extract a single URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_cycle.py
  python scripts/run_cycle.py --url https://www.flipkart.com/item/p/itm?pid=MOBGTAGPTB3VS24W
  python scripts/run_cycle.py --no-delay
        """,
    )

    parser.add_argument(
        "--url",
        help="Extract this URL only and print the result (no database writes)",
    )

    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Skip the pause between items",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (e.g. DEBUG)",
    )

    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
