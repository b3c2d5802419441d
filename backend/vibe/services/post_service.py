"""
Vibe Backend — Post Service
============================

What:  Feed, post CRUD, like toggling and comments.
Who:   Called by the /api/posts route handlers.

Ownership rules:
    - only the author may edit or delete a post
    - a comment may be deleted by its author or by the post's author

Likes are a set of user ids per post; toggling twice restores the original
count.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibe.exceptions import NotFoundError, PermissionDeniedError
from vibe.models import Comment, Post, PostLike, User
from vibe.models.common import utcnow
from vibe.schemas.common import PaginationInfo
from vibe.schemas.post import (
    CommentCreateRequest,
    CommentResponse,
    LikeResponse,
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from vibe.schemas.user import UserResponse

logger = logging.getLogger(__name__)


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        content=post.content,
        author=UserResponse.model_validate(post.author),
        images=list(post.images or []),
        likes=post.likes,
        comments=[CommentResponse.model_validate(c) for c in post.comments],
        created_at=post.created_at,
        updated_at=post.updated_at,
        likes_count=len(post.like_entries),
        comments_count=len(post.comments),
    )


class PostService:
    async def _get_post_or_404(self, db: AsyncSession, post_id: str) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return post

    def _require_author(self, post: Post, user: User, action: str) -> None:
        if post.author_id != user.id:
            logger.warning("User %s tried to %s post %s", user.id, action, post.id)
            raise PermissionDeniedError(f"You can only {action} your own posts")

    async def create_post(
        self, db: AsyncSession, author: User, data: PostCreateRequest
    ) -> PostResponse:
        post = Post(
            content=data.content,
            author=author,
            author_id=author.id,
            images=list(data.images or []),
            like_entries=[],
            comments=[],
        )
        db.add(post)
        await db.flush()
        logger.info("Post %s created by %s", post.id, author.id)
        return to_post_response(post)

    async def list_posts(self, db: AsyncSession, page: int = 1, limit: int = 20) -> PostListResponse:
        """Newest first, offset pagination."""
        total = (await db.execute(select(func.count(Post.id)))).scalar() or 0
        result = await db.execute(
            select(Post)
            .order_by(Post.created_at.desc(), Post.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        posts = result.scalars().all()
        return PostListResponse(
            posts=[to_post_response(p) for p in posts],
            pagination=PaginationInfo.build(page=page, limit=limit, total=total),
        )

    async def get_post(self, db: AsyncSession, post_id: str) -> PostResponse:
        return to_post_response(await self._get_post_or_404(db, post_id))

    async def update_post(
        self, db: AsyncSession, user: User, post_id: str, data: PostUpdateRequest
    ) -> PostResponse:
        post = await self._get_post_or_404(db, post_id)
        self._require_author(post, user, "edit")

        post.content = data.content
        if data.images is not None:
            post.images = list(data.images)
        post.updated_at = utcnow()
        await db.flush()
        logger.info("Post %s updated", post.id)
        return to_post_response(post)

    async def delete_post(self, db: AsyncSession, user: User, post_id: str) -> None:
        post = await self._get_post_or_404(db, post_id)
        self._require_author(post, user, "delete")
        await db.delete(post)
        await db.flush()
        logger.info("Post %s deleted by %s", post_id, user.id)

    async def toggle_like(self, db: AsyncSession, user: User, post_id: str) -> LikeResponse:
        post = await self._get_post_or_404(db, post_id)

        existing = next((e for e in post.like_entries if e.user_id == user.id), None)
        if existing is None:
            post.like_entries.append(PostLike(post_id=post.id, user_id=user.id))
            liked, message = True, "Post liked"
        else:
            post.like_entries.remove(existing)
            liked, message = False, "Like removed"
        await db.flush()

        return LikeResponse(liked=liked, likes_count=len(post.like_entries), message=message)

    async def add_comment(
        self, db: AsyncSession, user: User, post_id: str, data: CommentCreateRequest
    ) -> CommentResponse:
        post = await self._get_post_or_404(db, post_id)
        comment = Comment(
            content=data.content,
            author=user,
            author_id=user.id,
            post_id=post.id,
        )
        post.comments.append(comment)
        await db.flush()
        logger.info("Comment %s added to post %s", comment.id, post.id)
        return CommentResponse.model_validate(comment)

    async def list_comments(self, db: AsyncSession, post_id: str) -> List[CommentResponse]:
        post = await self._get_post_or_404(db, post_id)
        return [CommentResponse.model_validate(c) for c in post.comments]

    async def delete_comment(
        self, db: AsyncSession, user: User, post_id: str, comment_id: str
    ) -> None:
        post = await self._get_post_or_404(db, post_id)
        comment = next((c for c in post.comments if c.id == comment_id), None)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=comment_id)
        if user.id not in (comment.author_id, post.author_id):
            raise PermissionDeniedError("You can only delete your own comments")

        post.comments.remove(comment)
        await db.flush()
        logger.info("Comment %s deleted from post %s", comment_id, post_id)


post_service = PostService()
