"""
Vibe Backend — User SQLAlchemy Model
=====================================

What:  ORM model for the `users` table.
Who:   Auth, users, posts, marketplace and video services; every other
       model references a user row.

Table Design:
    - email and username are unique (checked by AuthService before insert,
      enforced again by the unique constraints)
    - password_hash holds a bcrypt hash; it is never part of any
      response schema
    - optional profile fields are nullable; PUT /api/users/me merges them
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vibe.database import Base
from vibe.models.common import UTCDateTime, new_id, utcnow


class User(Base):
    """A registered account and its public profile."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True, index=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # ── Optional profile ──────────────────────────────────────────────────
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # bcrypt hash string ($2b$<cost>$<salt+digest>)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
