"""Video room schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from vibe.schemas.common import CamelModel, PaginationInfo
from vibe.schemas.user import UserResponse

RoomStatus = Literal["waiting", "active", "ended"]


class RoomCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_private: bool
    max_participants: int = Field(ge=2, le=50)
    password: Optional[str] = Field(default=None, min_length=4, max_length=255)


class RoomUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_private: Optional[bool] = None
    max_participants: Optional[int] = Field(default=None, ge=2, le=50)
    password: Optional[str] = Field(default=None, min_length=4, max_length=255)


class JoinRoomRequest(CamelModel):
    password: Optional[str] = None


class RoomResponse(CamelModel):
    """
    A room as seen by one viewer.

    password is only filled in when the viewer is the current host.
    """
    id: str
    name: str
    description: Optional[str] = None
    host: UserResponse
    participants: List[UserResponse]
    is_private: bool
    max_participants: int
    password: Optional[str] = None
    status: RoomStatus
    created_at: datetime
    updated_at: datetime
    ended_at: Optional[datetime] = None
    participant_count: int


class RoomEnvelope(CamelModel):
    success: bool = True
    room: RoomResponse


class RoomMutationResponse(CamelModel):
    success: bool = True
    room: RoomResponse
    message: str


class RoomListResponse(CamelModel):
    success: bool = True
    rooms: List[RoomResponse]
    count: int


class RoomHistoryResponse(CamelModel):
    success: bool = True
    rooms: List[RoomResponse]
    pagination: PaginationInfo
