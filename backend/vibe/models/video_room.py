"""
Vibe Backend — Video Room Models
=================================

What:  ORM models for `video_rooms` and `room_participants`.

Room lifecycle:
    waiting ──(second participant joins)──▶ active
    waiting | active ──(host ends, or last participant leaves)──▶ ended

Participants are kept in join order (`seq`). When the host leaves, the
first remaining participant becomes host.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vibe.database import Base
from vibe.models.common import UTCDateTime, new_id, one_of, utcnow
from vibe.models.user import User

ROOM_STATUSES = ("waiting", "active", "ended")


class RoomParticipant(Base):
    __tablename__ = "room_participants"

    room_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("video_rooms.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    # Join order within the room, strictly increasing
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship(lazy="selectin")


class VideoRoom(Base):
    __tablename__ = "video_rooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    host_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="waiting", index=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
    ended_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    host: Mapped[User] = relationship(lazy="selectin", foreign_keys=[host_id])
    participant_entries: Mapped[List[RoomParticipant]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=RoomParticipant.seq,
    )

    __table_args__ = (
        CheckConstraint(one_of("status", ROOM_STATUSES), name="ck_video_rooms_status"),
        CheckConstraint("max_participants >= 2", name="ck_video_rooms_max_participants"),
    )

    @property
    def participants(self) -> List[User]:
        """Participants in join order."""
        return [entry.user for entry in self.participant_entries]

    def has_participant(self, user_id: str) -> bool:
        return any(entry.user_id == user_id for entry in self.participant_entries)

    def __repr__(self) -> str:
        return f"<VideoRoom(id={self.id}, name='{self.name}', status='{self.status}')>"
