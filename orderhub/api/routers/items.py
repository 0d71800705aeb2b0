"""Items router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.api.deps import get_item_service, get_session
from orderhub.api.schemas.common import PaginatedResponse, cursor_response
from orderhub.api.schemas.item import CreateItemRequest, ItemResponse
from orderhub.query import parse_cursor_params
from orderhub.services.item_service import ItemService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[ItemResponse])
async def list_items(
    request: Request,
    session: AsyncSession = Depends(get_session),
    svc: ItemService = Depends(get_item_service),
) -> PaginatedResponse[ItemResponse]:
    """Keyset list: ``limit``, ``cursor``, ``sortBy``, ``order``, ``direction``."""
    options = parse_cursor_params(request.query_params)
    page = await svc.list(session, options)
    return cursor_response(page, ItemResponse.model_validate)


@router.post("/", response_model=ItemResponse, status_code=201)
async def create_item(
    body: CreateItemRequest,
    session: AsyncSession = Depends(get_session),
    svc: ItemService = Depends(get_item_service),
) -> ItemResponse:
    item = await svc.create(
        session,
        name=body.name,
        price=body.price,
        description=body.description,
        sku=body.sku,
    )
    return ItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: str,
    session: AsyncSession = Depends(get_session),
    svc: ItemService = Depends(get_item_service),
) -> ItemResponse:
    item = await svc.get(session, item_id)
    return ItemResponse.model_validate(item)
