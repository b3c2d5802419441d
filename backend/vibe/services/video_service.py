"""
Vibe Backend — Video Room Service
==================================

What:  Room lifecycle for video calls: create, list, join, leave, end, edit.
       Signaling only; media never passes through this backend.
Who:   Called by the /api/video route handlers.

State machine:
    create          → status 'waiting', creator is host and first participant
    join (2nd user) → 'waiting' becomes 'active'
    host leaves     → host passes to the first remaining participant
    last leaves     → 'ended', ended_at set
    host ends       → 'ended', ended_at set

Join checks run in this order: ended → already inside → full → password.

Room passwords are shown only to the current host.
"""

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from vibe.models import RoomParticipant, User, VideoRoom
from vibe.models.common import utcnow
from vibe.schemas.common import PaginationInfo
from vibe.schemas.user import UserResponse
from vibe.schemas.video import (
    RoomCreateRequest,
    RoomHistoryResponse,
    RoomResponse,
    RoomUpdateRequest,
)

logger = logging.getLogger(__name__)

_REQUIRED_ROOM_FIELDS = {"name", "is_private", "max_participants"}


def to_room_response(room: VideoRoom, viewer_id: str) -> RoomResponse:
    participants = room.participants
    return RoomResponse(
        id=room.id,
        name=room.name,
        description=room.description,
        host=UserResponse.model_validate(room.host),
        participants=[UserResponse.model_validate(u) for u in participants],
        is_private=room.is_private,
        max_participants=room.max_participants,
        password=room.password if room.host_id == viewer_id else None,
        status=room.status,
        created_at=room.created_at,
        updated_at=room.updated_at,
        ended_at=room.ended_at,
        participant_count=len(participants),
    )


class VideoService:
    async def _get_room_or_404(self, db: AsyncSession, room_id: str) -> VideoRoom:
        room = await db.get(VideoRoom, room_id)
        if room is None:
            raise NotFoundError(resource="room", resource_id=room_id)
        return room

    def _require_host(self, room: VideoRoom, user: User, action: str) -> None:
        if room.host_id != user.id:
            logger.warning("User %s tried to %s room %s without being host", user.id, action, room.id)
            raise PermissionDeniedError(f"Only the host can {action} the room")

    def _end(self, room: VideoRoom) -> None:
        now = utcnow()
        room.status = "ended"
        room.ended_at = now
        room.updated_at = now

    async def create_room(
        self, db: AsyncSession, host: User, data: RoomCreateRequest
    ) -> RoomResponse:
        room = VideoRoom(
            name=data.name,
            description=data.description,
            host=host,
            host_id=host.id,
            is_private=data.is_private,
            max_participants=data.max_participants,
            password=data.password,
            status="waiting",
            participant_entries=[RoomParticipant(user=host, user_id=host.id, seq=0)],
        )
        db.add(room)
        await db.flush()
        logger.info("Room %s created by %s (private=%s)", room.id, host.id, room.is_private)
        return to_room_response(room, host.id)

    async def list_public_rooms(
        self, db: AsyncSession, viewer: User, status: str = "waiting"
    ) -> List[RoomResponse]:
        result = await db.execute(
            select(VideoRoom)
            .where(VideoRoom.is_private.is_(False), VideoRoom.status == status)
            .order_by(VideoRoom.created_at.desc())
        )
        return [to_room_response(r, viewer.id) for r in result.scalars().all()]

    async def get_room(self, db: AsyncSession, viewer: User, room_id: str) -> RoomResponse:
        """Private rooms are visible to their host and participants only."""
        room = await self._get_room_or_404(db, room_id)
        if room.is_private and room.host_id != viewer.id and not room.has_participant(viewer.id):
            raise PermissionDeniedError("Access to this private room is not allowed")
        return to_room_response(room, viewer.id)

    async def join_room(
        self,
        db: AsyncSession,
        user: User,
        room_id: str,
        password: Optional[str] = None,
    ) -> Tuple[RoomResponse, str]:
        """
        Add the caller to the room.

        Returns:
            (room, message). Joining a room one is already in is a no-op
            success.

        Raises:
            ConflictError: room ended, or room full
            PermissionDeniedError: password missing or wrong
        """
        room = await self._get_room_or_404(db, room_id)

        if room.status == "ended":
            raise ConflictError("This room has ended")

        if room.has_participant(user.id):
            return to_room_response(room, user.id), "You are already in this room"

        if len(room.participant_entries) >= room.max_participants:
            raise ConflictError(
                "The room is full",
                context={"max_participants": room.max_participants},
            )

        if room.password and not (
            password and secrets.compare_digest(password.encode(), room.password.encode())
        ):
            logger.warning("Wrong room password from %s for room %s", user.id, room.id)
            raise PermissionDeniedError("Incorrect room password")

        next_seq = max((e.seq for e in room.participant_entries), default=-1) + 1
        room.participant_entries.append(
            RoomParticipant(room_id=room.id, user=user, user_id=user.id, seq=next_seq)
        )
        room.updated_at = utcnow()
        if len(room.participant_entries) == 2 and room.status == "waiting":
            room.status = "active"
            logger.info("Room %s is now active", room.id)
        await db.flush()

        logger.info("User %s joined room %s", user.id, room.id)
        return to_room_response(room, user.id), "You joined the room"

    async def leave_room(self, db: AsyncSession, user: User, room_id: str) -> None:
        """
        Remove the caller; hand the host role on or end the room.

        Raises:
            ValidationError: the caller is not in the room
        """
        room = await self._get_room_or_404(db, room_id)
        entry = next((e for e in room.participant_entries if e.user_id == user.id), None)
        if entry is None:
            raise ValidationError("You are not in this room")

        room.participant_entries.remove(entry)
        room.updated_at = utcnow()

        if not room.participant_entries:
            self._end(room)
            logger.info("Room %s ended: last participant left", room.id)
        elif room.host_id == user.id:
            new_host = room.participant_entries[0].user
            room.host = new_host
            room.host_id = new_host.id
            logger.info("Room %s host transferred from %s to %s", room.id, user.id, new_host.id)

        await db.flush()
        logger.info("User %s left room %s", user.id, room.id)

    async def end_room(self, db: AsyncSession, user: User, room_id: str) -> RoomResponse:
        room = await self._get_room_or_404(db, room_id)
        self._require_host(room, user, "end")
        if room.status == "ended":
            raise ConflictError("The room has already ended")

        self._end(room)
        await db.flush()
        logger.info("Room %s ended by host %s", room.id, user.id)
        return to_room_response(room, user.id)

    async def history(
        self, db: AsyncSession, user: User, page: int = 1, limit: int = 20
    ) -> RoomHistoryResponse:
        """Rooms the caller hosts or is currently a participant of, newest first."""
        condition = or_(
            VideoRoom.host_id == user.id,
            VideoRoom.participant_entries.any(RoomParticipant.user_id == user.id),
        )
        total = (
            await db.execute(select(func.count(VideoRoom.id)).where(condition))
        ).scalar() or 0
        result = await db.execute(
            select(VideoRoom)
            .where(condition)
            .order_by(VideoRoom.created_at.desc(), VideoRoom.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return RoomHistoryResponse(
            rooms=[to_room_response(r, user.id) for r in result.scalars().all()],
            pagination=PaginationInfo.build(page=page, limit=limit, total=total),
        )

    async def update_room(
        self, db: AsyncSession, user: User, room_id: str, data: RoomUpdateRequest
    ) -> RoomResponse:
        """
        Host-only edit of room settings.

        Raises:
            PermissionDeniedError: caller is not the host
            ConflictError: room has ended
            ValidationError: new capacity below the current participant count
        """
        room = await self._get_room_or_404(db, room_id)
        self._require_host(room, user, "edit")
        if room.status == "ended":
            raise ConflictError("An ended room cannot be modified")

        for field in data.model_fields_set:
            value = getattr(data, field)
            if value is None and field in _REQUIRED_ROOM_FIELDS:
                raise ValidationError(f"{field} cannot be null", field=field)
            if field == "max_participants" and value < len(room.participant_entries):
                raise ValidationError(
                    "maxParticipants cannot be lower than the current number of participants",
                    field="maxParticipants",
                    context={"participants": len(room.participant_entries)},
                )
            setattr(room, field, value)
        room.updated_at = utcnow()
        await db.flush()
        logger.info("Room %s updated: %s", room.id, sorted(data.model_fields_set))
        return to_room_response(room, user.id)


video_service = VideoService()
