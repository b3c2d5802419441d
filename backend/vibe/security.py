"""
Vibe Backend — Password Hashing and Bearer Tokens
==================================================

What:  Credential primitives used by the auth service and auth dependencies.

Passwords:
    bcrypt with a per-hash random salt; the cost factor comes from
    settings.bcrypt_rounds. Stored hashes are the standard `$2b$...` string.

Tokens:
    HS256 JWT (PyJWT) with payload {userId, email, iat, exp}. Any decoding
    problem, including expiry or a missing `userId` claim, becomes an
    AuthenticationError("Invalid token").
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from vibe.config import settings
from vibe.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), stored_hash.encode("ascii"))
    except ValueError:
        logger.error("Malformed password hash encountered")
        return False


def create_access_token(user_id: str, email: str) -> str:
    """Sign a bearer token for the given user."""
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry, return the payload.

    Raises:
        AuthenticationError: the token is unusable for any reason.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise AuthenticationError("Invalid token", context={"reason": "expired"})
    except jwt.InvalidTokenError as e:
        logger.info("Rejected invalid token: %s", type(e).__name__)
        raise AuthenticationError("Invalid token", context={"reason": "invalid"})

    if not isinstance(payload.get("userId"), str):
        raise AuthenticationError("Invalid token", context={"reason": "missing_user_id"})
    return payload
