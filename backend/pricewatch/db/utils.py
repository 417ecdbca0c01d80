"""Database utility functions."""

from sqlalchemy.ext.asyncio import AsyncEngine

from pricewatch.models import Base


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
