"""FastAPI dependency injection providers."""

import uuid
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pricewatch.config import settings
from pricewatch.core.security import decode_owner_id
from pricewatch.db.session import async_session_factory
from pricewatch.scrapers.scheduler import TrackingScheduler
from pricewatch.scrapers.tracking_service import TrackingService
from pricewatch.services.catalog_store import CatalogStore
from pricewatch.services.item_service import ItemService

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> uuid.UUID:
    """Resolve the owner id from the bearer token.

    Raises 401 if the token is missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    owner_id = decode_owner_id(credentials.credentials)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id


def get_catalog_store() -> CatalogStore:
    return CatalogStore(async_session_factory)


def get_tracking_service(store: CatalogStore = Depends(get_catalog_store)) -> TrackingService:
    return TrackingService(store, drop_threshold_pct=settings.PRICE_DROP_THRESHOLD_PCT)


def get_item_service(
    db: AsyncSession = Depends(get_db),
    store: CatalogStore = Depends(get_catalog_store),
    tracking_service: TrackingService = Depends(get_tracking_service),
) -> ItemService:
    return ItemService(db, store, tracking_service)


def get_scheduler(request: Request) -> Optional[TrackingScheduler]:
    """The running TrackingScheduler, or None when scheduling is disabled."""
    return getattr(request.app.state, "scheduler", None)
