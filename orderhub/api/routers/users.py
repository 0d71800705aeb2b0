"""Users router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.api.deps import get_session, get_user_service
from orderhub.api.schemas.common import PaginatedResponse, page_response
from orderhub.api.schemas.user import CreateUserRequest, UpdateUserRequest, UserResponse
from orderhub.query import parse_page_params
from orderhub.services.user_service import UserService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[UserResponse])
async def list_users(
    request: Request,
    session: AsyncSession = Depends(get_session),
    svc: UserService = Depends(get_user_service),
) -> PaginatedResponse[UserResponse]:
    """Page-based list; filters ``name`` / ``email`` (substring, case-insensitive)."""
    options = parse_page_params(request.query_params)
    page = await svc.list(session, options)
    return page_response(page, UserResponse.model_validate)


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    body: CreateUserRequest,
    session: AsyncSession = Depends(get_session),
    svc: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await svc.create(session, email=body.email, name=body.name)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    svc: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await svc.get(session, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    session: AsyncSession = Depends(get_session),
    svc: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await svc.update(session, user_id, name=body.name)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    svc: UserService = Depends(get_user_service),
) -> Response:
    await svc.delete(session, user_id)
    return Response(status_code=204)
