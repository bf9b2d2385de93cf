"""Comment use cases. Comments never touch the post cache."""

from collections.abc import Mapping
from logging import getLogger
from typing import Any

from blogpost.configs import file_logger
from blogpost.db import SessionMaker, transaction
from blogpost.errors import CommentNotFoundError, PostNotFoundError
from blogpost.models import CommentDB
from blogpost.repositories import CommentRepository, PostRepository
from blogpost.schemas import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    PageResponse,
    validate_payload,
)

logger = file_logger(getLogger(__name__))


class CommentService:
    """Comment operations."""

    def __init__(self, session_maker: SessionMaker) -> None:
        self.session_maker = session_maker

    async def get_comments_by_post_id(
        self,
        post_id: int,
        page: int = 0,
        size: int = 10,
    ) -> PageResponse[CommentResponse]:
        """Comments of a post, newest first."""
        async with transaction(self.session_maker) as session:
            comments, total = await CommentRepository(session).find_by_post_id(post_id, page, size)
            content = [CommentResponse.from_db(comment) for comment in comments]
        return PageResponse[CommentResponse].build(content, total, page, size)

    async def get_comment_by_id(self, comment_id: int) -> CommentResponse | None:
        async with transaction(self.session_maker) as session:
            comment = await CommentRepository(session).get_by_id(comment_id)
            return None if comment is None else CommentResponse.from_db(comment)

    async def create_comment(
        self,
        post_id: int,
        data: CommentCreate | Mapping[str, Any],
    ) -> CommentResponse:
        """
        Attach a new comment to a post.

        Raises:
            ValidationError: If the payload violates any field constraint.
            PostNotFoundError: If the post does not exist.
        """
        payload = validate_payload(CommentCreate, data)
        async with transaction(self.session_maker) as session:
            if await PostRepository(session).get_by_id(post_id) is None:
                raise PostNotFoundError(post_id)
            comment = CommentDB(
                content=payload.content,
                author_name=payload.author_name,
                author_email=payload.author_email,
                post_id=post_id,
            )
            await CommentRepository(session).save(comment)
            response = CommentResponse.from_db(comment)

        logger.info(f"Created comment {response.id} on post {post_id}")
        return response

    async def update_comment(
        self,
        comment_id: int,
        data: CommentUpdate | Mapping[str, Any],
    ) -> CommentResponse:
        """
        Replace the text and author details of a comment.

        All three fields are overwritten, a missing email clears the stored one.
        The owning post is never changed, even if the payload names another one.
        """
        payload = validate_payload(CommentUpdate, data)
        async with transaction(self.session_maker) as session:
            repo = CommentRepository(session)
            comment = await repo.get_by_id(comment_id)
            if comment is None:
                raise CommentNotFoundError(comment_id)
            for field, value in payload.changes().items():
                setattr(comment, field, value)
            await repo.save(comment)
            return CommentResponse.from_db(comment)

    async def delete_comment(self, comment_id: int) -> None:
        async with transaction(self.session_maker) as session:
            repo = CommentRepository(session)
            comment = await repo.get_by_id(comment_id)
            if comment is None:
                raise CommentNotFoundError(comment_id)
            await repo.delete(comment)
        logger.info(f"Deleted comment {comment_id}")

    async def get_comment_count_by_post_id(self, post_id: int) -> int:
        """Number of comments on a post, 0 for an unknown post."""
        async with transaction(self.session_maker) as session:
            return await CommentRepository(session).count_by_post_id(post_id)
