"""Post, like and comment schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from vibe.schemas.common import CamelModel, PaginationInfo
from vibe.schemas.user import UserResponse


class PostCreateRequest(CamelModel):
    content: str = Field(min_length=1, max_length=5000)
    images: Optional[List[str]] = None


class PostUpdateRequest(CamelModel):
    """Content is required; omitted images keep the current list."""
    content: str = Field(min_length=1, max_length=5000)
    images: Optional[List[str]] = None


class CommentCreateRequest(CamelModel):
    content: str = Field(min_length=1, max_length=1000)


class CommentResponse(CamelModel):
    id: str
    content: str
    author: UserResponse
    post_id: str
    created_at: datetime
    updated_at: datetime


class PostResponse(CamelModel):
    """
    A post with its author, likes and comments embedded.

    likes holds user ids; likes_count and comments_count are derived on
    read and never stored.
    """
    id: str
    content: str
    author: UserResponse
    images: List[str]
    likes: List[str]
    comments: List[CommentResponse]
    created_at: datetime
    updated_at: datetime
    likes_count: int
    comments_count: int


class PostEnvelope(CamelModel):
    success: bool = True
    post: PostResponse


class PostMutationResponse(CamelModel):
    success: bool = True
    post: PostResponse
    message: str


class PostListResponse(CamelModel):
    success: bool = True
    posts: List[PostResponse]
    pagination: PaginationInfo


class LikeResponse(CamelModel):
    success: bool = True
    liked: bool
    likes_count: int
    message: str


class CommentMutationResponse(CamelModel):
    success: bool = True
    comment: CommentResponse
    message: str


class CommentListResponse(CamelModel):
    success: bool = True
    comments: List[CommentResponse]
