"""
Vibe Backend — Post, Like and Comment Models
=============================================

What:  ORM models for `posts`, `post_likes` and `comments`.

Relationships:
    Post ──author──▶ User
    Post ──like_entries──▶ PostLike (one row per liking user)
    Post ──comments──▶ Comment ──author──▶ User

    Every relationship is loaded with `selectin`: responses always embed the
    author and need the like/comment counts, and async sessions cannot lazy
    load on attribute access.

    Likes and comments belong to their post (delete-orphan): deleting a post
    removes them, and removing a PostLike from the collection deletes the row.
"""

from datetime import datetime
from typing import List

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vibe.database import Base
from vibe.models.common import UTCDateTime, new_id, utcnow
from vibe.models.user import User


class PostLike(Base):
    """Membership row: `user_id` likes `post_id`."""

    __tablename__ = "post_likes"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship(lazy="selectin")


class Post(Base):
    """A feed entry. The feed is ordered newest first."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Image URLs; always reassigned, never mutated in place
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship(lazy="selectin")
    like_entries: Mapped[List[PostLike]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=PostLike.created_at,
    )
    comments: Mapped[List[Comment]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=Comment.created_at,
    )

    @property
    def likes(self) -> List[str]:
        """Ids of the users who liked this post, in like order."""
        return [entry.user_id for entry in self.like_entries]

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, author_id={self.author_id})>"
