"""Tests for the catalog store."""

import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from pricewatch.core.exceptions import PersistenceError
from pricewatch.models import ExtractionLog, Notification, PriceObservation
from pricewatch.services.catalog_store import CatalogStore

from conftest import FIXED_NOW


class TestListAvailableItems:
    """Tests for CatalogStore.list_available_items."""

    async def test_excludes_out_of_stock_by_default(self, store, make_item):
        in_stock = await make_item()
        await make_item(is_available=False)

        items = await store.list_available_items()

        assert [i.id for i in items] == [in_stock.id]

    async def test_can_include_out_of_stock(self, store, make_item):
        await make_item()
        await make_item(is_available=False)

        items = await store.list_available_items(include_out_of_stock=True)

        assert len(items) == 2

    async def test_never_checked_items_come_first(self, store, make_item):
        checked = await make_item(last_checked_at=FIXED_NOW - timedelta(days=2))
        fresh = await make_item(last_checked_at=None)

        items = await store.list_available_items()

        assert [i.id for i in items] == [fresh.id, checked.id]


class TestUpdateItem:
    """Tests for CatalogStore.update_item."""

    async def test_applies_patch(self, store, make_item):
        item = await make_item()

        updated = await store.update_item(item.id, {
            "current_price": Decimal("80.00"),
            "lowest_price": Decimal("80.00"),
            "last_checked_at": FIXED_NOW,
        })

        assert updated.current_price == Decimal("80.00")
        reloaded = await store.get_item(item.id)
        assert reloaded.lowest_price == Decimal("80.00")
        assert reloaded.highest_price == Decimal("120.00")

    async def test_missing_item_raises(self, store):
        with pytest.raises(PersistenceError):
            await store.update_item(uuid.uuid4(), {"is_available": False})

    async def test_rejects_owner_fields(self, store, make_item):
        item = await make_item()

        with pytest.raises(PersistenceError):
            await store.update_item(item.id, {"currency": "USD"})
        with pytest.raises(PersistenceError):
            await store.update_item(item.id, {"target_price": Decimal("1")})


class TestInserts:
    """Tests for observation, event and audit log inserts."""

    async def test_insert_observation(self, store, make_item, test_db):
        item = await make_item()

        await store.insert_observation({
            "item_id": item.id,
            "price": Decimal("99.00"),
            "currency": "INR",
            "is_available": True,
        })

        rows = (await test_db.execute(select(PriceObservation))).scalars().all()
        assert len(rows) == 1
        assert rows[0].price == Decimal("99.00")

    async def test_insert_event_without_item(self, store, owner_id, test_db):
        await store.insert_event({
            "owner_id": owner_id,
            "item_id": None,
            "kind": "scraping_error",
            "title": "Failed to Add Product",
            "message": "Could not read product details",
        })

        rows = (await test_db.execute(select(Notification))).scalars().all()
        assert len(rows) == 1
        assert rows[0].is_read is False

    async def test_insert_audit_log(self, store, make_item, test_db):
        item = await make_item()

        await store.insert_audit_log({"item_id": item.id, "status": "blocked", "duration_ms": 12})

        rows = (await test_db.execute(select(ExtractionLog))).scalars().all()
        assert rows[0].status == "blocked"
        assert rows[0].duration_ms == 12


class TestErrorMapping:
    """SQLAlchemy failures surface as PersistenceError."""

    async def test_database_error_is_wrapped(self):
        failing_factory = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("db down")))
        store = CatalogStore(failing_factory)

        with pytest.raises(PersistenceError) as exc_info:
            await store.list_available_items()

        assert exc_info.value.operation == "list_available_items"
