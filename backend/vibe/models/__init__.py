"""ORM models. Importing this package registers every table on Base.metadata."""

from vibe.models.post import Comment, Post, PostLike
from vibe.models.product import PRODUCT_CONDITIONS, PRODUCT_STATUSES, Product
from vibe.models.user import User
from vibe.models.video_room import ROOM_STATUSES, RoomParticipant, VideoRoom

__all__ = [
    "Comment",
    "Post",
    "PostLike",
    "PRODUCT_CONDITIONS",
    "PRODUCT_STATUSES",
    "Product",
    "ROOM_STATUSES",
    "RoomParticipant",
    "User",
    "VideoRoom",
]
