"""Pytest configuration and shared fixtures."""

import os

# Settings are read once at import; keep the scheduler and the real
# database out of the test run.
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Union
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricewatch.db.session import build_engine
from pricewatch.models import Base, TrackedItem
from pricewatch.scrapers.base import ExtractionStrategy, Snapshot
from pricewatch.scrapers.registry import StrategyRegistry
from pricewatch.scrapers.tracking_service import TrackingService
from pricewatch.services.catalog_store import CatalogStore


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class StubStrategy(ExtractionStrategy):
    """Strategy that returns canned snapshots instead of opening a browser.

    ``results`` maps URL -> Snapshot or exception instance. URLs not in the
    map get ``default``.
    """

    platform = "stub"

    def __init__(self, results: Optional[Dict[str, Union[Snapshot, Exception]]] = None):
        super().__init__(browser_manager=MagicMock(), settle_delay=(0, 0))
        self.results = results or {}
        self.default: Optional[Union[Snapshot, Exception]] = None
        self.calls: List[str] = []

    def can_handle(self, url: str) -> bool:
        return True

    def parse(self, html: str, url: str) -> Snapshot:
        raise NotImplementedError

    async def extract(self, url: str) -> Snapshot:
        self.calls.append(url)
        result = self.results.get(url, self.default)
        if result is None:
            raise AssertionError(f"no stubbed result for {url}")
        if isinstance(result, Exception):
            raise result
        return result


def make_snapshot(
    price: Optional[str] = "100.00",
    is_available: bool = True,
    title: str = "Test Headphones",
    currency: Optional[str] = "INR",
    external_id: str = "B000TEST01",
) -> Snapshot:
    return Snapshot(
        title=title,
        price=Decimal(price) if price is not None else None,
        currency=currency,
        is_available=is_available,
        external_id=external_id,
        image_url="https://example.com/img.jpg",
    )


# ============================================================================
# FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite database for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> CatalogStore:
    return CatalogStore(session_factory)


@pytest.fixture
def stub_strategy() -> StubStrategy:
    return StubStrategy()


@pytest.fixture
def tracking_service(store, stub_strategy) -> TrackingService:
    return TrackingService(
        store,
        registry=StrategyRegistry([stub_strategy]),
        drop_threshold_pct=5.0,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def make_item(session_factory, owner_id):
    """Insert a tracked item and return it (detached, fully loaded)."""

    async def _make_item(**overrides) -> TrackedItem:
        fields = dict(
            owner_id=owner_id,
            url=f"https://www.amazon.in/dp/B0{uuid.uuid4().hex[:8].upper()}",
            platform="amazon",
            external_id="B000TEST01",
            title="Test Headphones",
            currency="INR",
            current_price=Decimal("100.00"),
            lowest_price=Decimal("90.00"),
            highest_price=Decimal("120.00"),
            is_available=True,
            check_frequency_hours=24,
        )
        fields.update(overrides)
        item = TrackedItem(**fields)

        async with session_factory() as db:
            db.add(item)
            await db.commit()
            await db.refresh(item)
        return item

    return _make_item
