"""
Vibe Backend — Video Room Route Handlers
=========================================

What:  /api/video: room creation, discovery, join/leave, end, history, edit.
Auth:  Every route requires a bearer token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.dependencies import get_current_user
from vibe.models import User
from vibe.schemas.common import ErrorResponse, MessageResponse
from vibe.schemas.video import (
    JoinRoomRequest,
    RoomCreateRequest,
    RoomEnvelope,
    RoomHistoryResponse,
    RoomListResponse,
    RoomMutationResponse,
    RoomStatus,
    RoomUpdateRequest,
)
from vibe.services.video_service import video_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/video",
    tags=["Video"],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Room not found", "model": ErrorResponse},
    },
)


@router.post("/rooms", status_code=201, response_model=RoomMutationResponse, summary="Create a room")
async def create_room(
    body: RoomCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomMutationResponse:
    room = await video_service.create_room(db, current_user, body)
    return RoomMutationResponse(room=room, message="Video room created successfully")


@router.get("/rooms", response_model=RoomListResponse, summary="Public rooms by status")
async def list_rooms(
    status: RoomStatus = Query(default="waiting"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomListResponse:
    rooms = await video_service.list_public_rooms(db, current_user, status)
    return RoomListResponse(rooms=rooms, count=len(rooms))


@router.get("/history", response_model=RoomHistoryResponse, summary="Rooms hosted or joined")
async def room_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomHistoryResponse:
    return await video_service.history(db, current_user, page=page, limit=limit)


@router.get(
    "/rooms/{room_id}",
    response_model=RoomEnvelope,
    responses={403: {"description": "Private room", "model": ErrorResponse}},
    summary="Get a room",
)
async def get_room(
    room_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomEnvelope:
    return RoomEnvelope(room=await video_service.get_room(db, current_user, room_id))


@router.post(
    "/rooms/{room_id}/join",
    response_model=RoomMutationResponse,
    responses={
        403: {"description": "Wrong or missing password", "model": ErrorResponse},
        409: {"description": "Room ended or full", "model": ErrorResponse},
    },
    summary="Join a room",
)
async def join_room(
    room_id: str,
    body: Optional[JoinRoomRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomMutationResponse:
    password = body.password if body else None
    room, message = await video_service.join_room(db, current_user, room_id, password)
    return RoomMutationResponse(room=room, message=message)


@router.post(
    "/rooms/{room_id}/leave",
    response_model=MessageResponse,
    responses={400: {"description": "Not in this room", "model": ErrorResponse}},
    summary="Leave a room",
)
async def leave_room(
    room_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await video_service.leave_room(db, current_user, room_id)
    return MessageResponse(message="You left the room")


@router.post(
    "/rooms/{room_id}/end",
    response_model=RoomMutationResponse,
    responses={
        403: {"description": "Not the host", "model": ErrorResponse},
        409: {"description": "Already ended", "model": ErrorResponse},
    },
    summary="End a room (host only)",
)
async def end_room(
    room_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomMutationResponse:
    room = await video_service.end_room(db, current_user, room_id)
    return RoomMutationResponse(room=room, message="Room ended successfully")


@router.put(
    "/rooms/{room_id}",
    response_model=RoomMutationResponse,
    responses={
        400: {"description": "Capacity below participant count", "model": ErrorResponse},
        403: {"description": "Not the host", "model": ErrorResponse},
        409: {"description": "Room has ended", "model": ErrorResponse},
    },
    summary="Edit room settings (host only)",
)
async def update_room(
    room_id: str,
    body: RoomUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RoomMutationResponse:
    room = await video_service.update_room(db, current_user, room_id, body)
    return RoomMutationResponse(room=room, message="Room updated successfully")
