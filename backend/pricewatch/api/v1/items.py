"""Tracked item API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from pricewatch.core.exceptions import ExtractionError
from pricewatch.dependencies import get_current_owner, get_item_service
from pricewatch.schemas.common import ApiResponse, ListMeta
from pricewatch.schemas.item import (
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    PriceHistoryPoint,
)
from pricewatch.services.item_service import ItemService

router = APIRouter()


def _item_data(item) -> dict:
    return ItemResponse.model_validate(item).model_dump(mode="json")


@router.get("", response_model=ApiResponse)
async def list_items(
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Get all tracked items of the current owner, newest first."""
    items = await service.list_items(owner_id)

    return ApiResponse(
        status="success",
        data=[_item_data(i) for i in items],
        meta=ListMeta(count=len(items)),
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def create_item(
    body: ItemCreateRequest,
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Start tracking a product URL.

    The page is extracted before anything is stored. If that fails the
    item is not created and the response is 400.
    """
    try:
        item = await service.create_item(
            owner_id=owner_id,
            url=body.url,
            target_price=body.target_price,
            check_frequency_hours=body.check_frequency_hours,
        )
    except ExtractionError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "extraction_failed",
                "message": "Failed to read product details. Please check the URL and try again.",
                "details": e.message,
            },
        )

    return ApiResponse(status="success", data=_item_data(item))


@router.get("/{item_id}", response_model=ApiResponse)
async def get_item(
    item_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    item = await service.get_item(item_id, owner_id)
    return ApiResponse(status="success", data=_item_data(item))


@router.patch("/{item_id}", response_model=ApiResponse)
async def update_item(
    item_id: UUID,
    body: ItemUpdateRequest,
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Change the target price or check interval of an item."""
    item = await service.update_item(item_id, owner_id, body.model_dump(exclude_unset=True))
    return ApiResponse(status="success", data=_item_data(item))


@router.delete("/{item_id}", response_model=ApiResponse)
async def delete_item(
    item_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Stop tracking an item and drop its history and notifications."""
    await service.delete_item(item_id, owner_id)
    return ApiResponse(status="success", data={"deleted": True})


@router.post("/{item_id}/refresh", response_model=ApiResponse)
async def refresh_item(
    item_id: UUID,
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Check an item right now.

    Extraction failures return 502 and store failures 503; both are
    mapped by the application exception handlers.
    """
    item = await service.refresh_item(item_id, owner_id)
    return ApiResponse(status="success", data=_item_data(item))


@router.get("/{item_id}/history", response_model=ApiResponse)
async def get_item_history(
    item_id: UUID,
    limit: int = Query(30, ge=1, le=500),
    owner_id: UUID = Depends(get_current_owner),
    service: ItemService = Depends(get_item_service),
):
    """Get recorded prices for an item, newest first."""
    points = await service.get_history(item_id, owner_id, limit=limit)

    return ApiResponse(
        status="success",
        data=[PriceHistoryPoint.model_validate(p).model_dump(mode="json") for p in points],
        meta=ListMeta(count=len(points), limit=limit),
    )
