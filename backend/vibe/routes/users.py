"""
Vibe Backend — User Route Handlers
===================================

What:  /api/users: own profile, profile update, search, suggestions, lookup.
Auth:  Every route requires a bearer token (get_current_user).

Static paths (/me, /search, /suggestions) are declared before /{user_id}
so they are not captured as ids.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.dependencies import get_current_user
from vibe.models import User
from vibe.schemas.common import ErrorResponse
from vibe.schemas.user import (
    SuggestionsResponse,
    UserEnvelope,
    UserResponse,
    UserSearchResponse,
    UserUpdateRequest,
    UserUpdateResponse,
)
from vibe.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get("/me", response_model=UserEnvelope, summary="Profile of the authenticated user")
async def get_me(current_user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.model_validate(current_user))


@router.put("/me", response_model=UserUpdateResponse, summary="Update own profile")
async def update_me(
    body: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserUpdateResponse:
    user = await user_service.update_profile(db, current_user, body)
    return UserUpdateResponse(user=user, message="Profile updated successfully")


@router.get(
    "/search",
    response_model=UserSearchResponse,
    responses={400: {"description": "Query shorter than 2 characters", "model": ErrorResponse}},
    summary="Search users by name or username",
)
async def search_users(
    q: Optional[str] = Query(default=None, description="Search term (at least 2 characters)"),
    limit: int = Query(default=10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserSearchResponse:
    users = await user_service.search_users(db, q, limit)
    return UserSearchResponse(users=users, total=len(users))


@router.get(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="Friend suggestions (most recent accounts)",
)
async def suggestions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuggestionsResponse:
    return SuggestionsResponse(suggestions=await user_service.suggestions(db, current_user))


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Public profile of a user",
)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return UserEnvelope(user=await user_service.get_user(db, user_id))
