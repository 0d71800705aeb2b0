"""Orders router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.api.deps import get_order_service, get_session
from orderhub.api.schemas.common import PaginatedResponse, page_response
from orderhub.api.schemas.order import (
    CreateOrderRequest,
    OrderDiscount,
    OrderResponse,
    OrderWithUser,
)
from orderhub.query import parse_page_params
from orderhub.services.order_service import OrderService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[OrderWithUser])
async def list_orders(
    request: Request,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> PaginatedResponse[OrderWithUser]:
    """Page-based list joined with users.

    Filters: ``status``, ``status_in`` (repeat the key), ``min_total``,
    ``max_total``, ``total_between`` (two values), ``user_id``,
    ``user_name``, ``user_email``.
    """
    options = parse_page_params(request.query_params)
    page = await svc.list(session, options)
    return page_response(page, OrderWithUser.model_validate)


@router.post("/", response_model=OrderResponse, status_code=201)
async def create_order(
    body: CreateOrderRequest,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await svc.create(
        session,
        user_id=body.user_id,
        items=[item.model_dump() for item in body.items],
    )
    return OrderResponse.model_validate(order)


@router.get("/user/{user_id}", response_model=list[OrderResponse])
async def list_user_orders(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> list[OrderResponse]:
    orders = await svc.list_by_user(session, user_id)
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("/user/{user_id}/paginated", response_model=PaginatedResponse[OrderResponse])
async def list_user_orders_paginated(
    user_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> PaginatedResponse[OrderResponse]:
    options = parse_page_params(request.query_params)
    page = await svc.list_by_user_paginated(session, user_id, options)
    return page_response(page, OrderResponse.model_validate)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await svc.get(session, order_id)
    return OrderResponse.model_validate(order)


@router.get("/{order_id}/discount", response_model=OrderDiscount)
async def get_order_discount(
    order_id: str,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> OrderDiscount:
    return OrderDiscount(**await svc.discount(session, order_id))


@router.post("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_order(
    order_id: str,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await svc.confirm(session, order_id)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/ship", response_model=OrderResponse)
async def ship_order(
    order_id: str,
    session: AsyncSession = Depends(get_session),
    svc: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = await svc.ship(session, order_id)
    return OrderResponse.model_validate(order)
