"""
Vibe Backend — Post Route Handlers
===================================

What:  /api/posts: feed, post CRUD, likes and comments.
Auth:  Every route requires a bearer token.

Route Inventory:
    POST   /api/posts                              create
    GET    /api/posts?page=&limit=                 feed (newest first)
    GET    /api/posts/{id}                         detail
    PUT    /api/posts/{id}                         edit (author only)
    DELETE /api/posts/{id}                         delete (author only)
    POST   /api/posts/{id}/like                    toggle like
    POST   /api/posts/{id}/comments                add comment
    GET    /api/posts/{id}/comments                list comments
    DELETE /api/posts/{id}/comments/{comment_id}   delete comment
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.database import get_db_session
from vibe.dependencies import get_current_user
from vibe.models import User
from vibe.schemas.common import ErrorResponse, MessageResponse
from vibe.schemas.post import (
    CommentCreateRequest,
    CommentListResponse,
    CommentMutationResponse,
    LikeResponse,
    PostCreateRequest,
    PostEnvelope,
    PostListResponse,
    PostMutationResponse,
    PostUpdateRequest,
)
from vibe.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/posts",
    tags=["Posts"],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
)


@router.post("", status_code=201, response_model=PostMutationResponse, summary="Create a post")
@router.post("/", status_code=201, response_model=PostMutationResponse, include_in_schema=False)
async def create_post(
    body: PostCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostMutationResponse:
    post = await post_service.create_post(db, current_user, body)
    return PostMutationResponse(post=post, message="Post created successfully")


@router.get("", response_model=PostListResponse, summary="News feed")
@router.get("/", response_model=PostListResponse, include_in_schema=False)
async def list_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    return await post_service.list_posts(db, page=page, limit=limit)


@router.get("/{post_id}", response_model=PostEnvelope, summary="Get a post")
async def get_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostEnvelope:
    return PostEnvelope(post=await post_service.get_post(db, post_id))


@router.put(
    "/{post_id}",
    response_model=PostMutationResponse,
    responses={403: {"description": "Not the author", "model": ErrorResponse}},
    summary="Edit a post",
)
async def update_post(
    post_id: str,
    body: PostUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostMutationResponse:
    post = await post_service.update_post(db, current_user, post_id, body)
    return PostMutationResponse(post=post, message="Post updated successfully")


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={403: {"description": "Not the author", "model": ErrorResponse}},
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_post(db, current_user, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeResponse, summary="Like or unlike a post")
async def toggle_like(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    return await post_service.toggle_like(db, current_user, post_id)


@router.post(
    "/{post_id}/comments",
    status_code=201,
    response_model=CommentMutationResponse,
    summary="Comment on a post",
)
async def add_comment(
    post_id: str,
    body: CommentCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentMutationResponse:
    comment = await post_service.add_comment(db, current_user, post_id, body)
    return CommentMutationResponse(comment=comment, message="Comment added successfully")


@router.get("/{post_id}/comments", response_model=CommentListResponse, summary="List comments")
async def list_comments(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentListResponse:
    return CommentListResponse(comments=await post_service.list_comments(db, post_id))


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=MessageResponse,
    responses={403: {"description": "Neither comment nor post author", "model": ErrorResponse}},
    summary="Delete a comment",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await post_service.delete_comment(db, current_user, post_id, comment_id)
    return MessageResponse(message="Comment deleted successfully")
