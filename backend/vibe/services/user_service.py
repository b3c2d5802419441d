"""
Vibe Backend — User Service
============================

What:  Profile lookup, profile update, user search and friend suggestions.
Who:   Called by the /api/users route handlers.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.exceptions import NotFoundError, ValidationError
from vibe.models import User
from vibe.models.common import utcnow
from vibe.schemas.user import UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SUGGESTION_COUNT = 10

# Profile fields that cannot be cleared with an explicit null
_REQUIRED_PROFILE_FIELDS = {"first_name", "last_name"}


class UserService:
    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserResponse.model_validate(user)

    async def update_profile(
        self, db: AsyncSession, user: User, data: UserUpdateRequest
    ) -> UserResponse:
        """
        Merge the fields present in the request into the caller's profile.

        Fields absent from the body are left untouched; optional fields sent
        as null are cleared.
        """
        for field in data.model_fields_set:
            value = getattr(data, field)
            if value is None and field in _REQUIRED_PROFILE_FIELDS:
                raise ValidationError(f"{field} cannot be null", field=field)
            setattr(user, field, value)
        user.updated_at = utcnow()
        await db.flush()

        logger.info("Profile updated for %s: %s", user.id, sorted(data.model_fields_set))
        return UserResponse.model_validate(user)

    async def search_users(
        self, db: AsyncSession, query: Optional[str], limit: int = 10
    ) -> List[UserResponse]:
        """
        Case-insensitive substring search over first name, last name and
        username.

        Raises:
            ValidationError: query shorter than two characters
        """
        term = (query or "").lower()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ValidationError(
                f"Search query must contain at least {MIN_SEARCH_LENGTH} characters",
                field="q",
            )

        stmt = (
            select(User)
            .where(
                or_(
                    func.lower(User.first_name).contains(term, autoescape=True),
                    func.lower(User.last_name).contains(term, autoescape=True),
                    func.lower(User.username).contains(term, autoescape=True),
                )
            )
            .order_by(User.created_at)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def suggestions(self, db: AsyncSession, user: User) -> List[UserResponse]:
        """Most recently registered users other than the caller."""
        stmt = (
            select(User)
            .where(User.id != user.id)
            .order_by(User.created_at.desc())
            .limit(SUGGESTION_COUNT)
        )
        result = await db.execute(stmt)
        return [UserResponse.model_validate(u) for u in result.scalars().all()]


user_service = UserService()
