"""
Vibe Backend — Auth Service
============================

What:  Registration, login and token verification.
Who:   Called by the /api/auth route handlers.

Flow:
    register: uniqueness check (email OR username) → insert user with
              password hash → sign token
    login:    look up by email → constant-time hash check → sign token
    verify:   decode token → load user (404 if the account is gone)

Emails are compared lower-cased; usernames are case-sensitive.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.exceptions import AuthenticationError, ConflictError, NotFoundError
from vibe.models import User
from vibe.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from vibe.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthService:
    async def register(self, db: AsyncSession, data: RegisterRequest) -> AuthResponse:
        """
        Create an account and sign its first token.

        Raises:
            ConflictError: email or username already taken
        """
        email = data.email.lower()
        result = await db.execute(
            select(User.id).where(or_(User.email == email, User.username == data.username))
        )
        if result.first() is not None:
            raise ConflictError(
                "A user with this email or username already exists",
                context={"email": email, "username": data.username},
            )

        user = User(
            email=email,
            username=data.username,
            first_name=data.first_name,
            last_name=data.last_name,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration
            raise ConflictError("A user with this email or username already exists")

        logger.info("User registered: %s (%s)", user.id, user.username)
        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=create_access_token(user.id, user.email),
        )

    async def login(self, db: AsyncSession, data: LoginRequest) -> AuthResponse:
        """
        Check credentials and sign a token.

        The same message is used for unknown email and wrong password so the
        endpoint cannot be used to probe for accounts.
        """
        result = await db.execute(select(User).where(User.email == data.email.lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login for %s", data.email)
            raise AuthenticationError("Invalid email or password")

        logger.info("User logged in: %s", user.id)
        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=create_access_token(user.id, user.email),
        )

    async def verify(self, db: AsyncSession, token: str) -> User:
        payload = decode_access_token(token)
        user = await db.get(User, payload["userId"])
        if user is None:
            raise NotFoundError(resource="user", resource_id=payload["userId"])
        return user


auth_service = AuthService()
