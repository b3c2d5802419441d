"""
Vibe Backend — Authentication Dependencies
===========================================

What:  FastAPI dependencies resolving the caller from the bearer token.
How:   HTTPBearer(auto_error=False) extracts the token without failing, so
       the two flavours below can choose how to react to its absence:

       get_current_user   → raises AuthenticationError (401) when the token
                            is missing, invalid, or its user is gone.
                            Used by users, posts and video routes.
       get_optional_user  → returns None instead of raising.
                            Used by marketplace, where reading is public.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.exceptions import AuthenticationError
from vibe.models import User
from vibe.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing token")

    payload = decode_access_token(credentials.credentials)
    user = await db.get(User, payload["userId"])
    if user is None:
        logger.warning("Token references unknown user %s", payload["userId"])
        raise AuthenticationError("User not found")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except AuthenticationError:
        return None
    return await db.get(User, payload["userId"])
