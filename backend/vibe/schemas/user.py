"""User and authentication request/response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from vibe.schemas.common import CamelModel


class UserResponse(CamelModel):
    """
    Public profile of a user.

    Embedded in posts, comments, products and rooms. The password hash is
    deliberately absent.
    """
    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ── Auth ──────────────────────────────────────────────────────────────────


class RegisterRequest(CamelModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=30)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    """Returned by register and login: the user plus a fresh bearer token."""
    success: bool = True
    user: UserResponse
    token: str


# ── Profile ───────────────────────────────────────────────────────────────


class UserUpdateRequest(CamelModel):
    """
    Partial profile update.

    Only keys present in the request body are applied (model_fields_set).
    """
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=200)
    avatar: Optional[str] = None


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse


class UserUpdateResponse(CamelModel):
    success: bool = True
    user: UserResponse
    message: str


class UserSearchResponse(CamelModel):
    success: bool = True
    users: List[UserResponse]
    total: int = Field(description="Number of users returned")


class SuggestionsResponse(CamelModel):
    success: bool = True
    suggestions: List[UserResponse]
