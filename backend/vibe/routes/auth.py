"""
Vibe Backend — Auth Route Handlers
===================================

What:  /api/auth: register, login, verify, logout.
How:   Validates bodies with Pydantic, delegates to AuthService.

Tokens are stateless JWTs, so logout only acknowledges the request; the
client drops its token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.dependencies import bearer_scheme
from vibe.exceptions import AuthenticationError
from vibe.schemas.common import ErrorResponse, MessageResponse
from vibe.schemas.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from vibe.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        409: {"description": "Email or username already taken", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.register(db, body)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, body)


@router.get(
    "/verify",
    response_model=UserEnvelope,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Check a bearer token and return its user",
)
async def verify(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing token")
    user = await auth_service.verify(db, credentials.credentials)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse, summary="Log out (client side)")
async def logout() -> MessageResponse:
    return MessageResponse(message="Logged out successfully")
