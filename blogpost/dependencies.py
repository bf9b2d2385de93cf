"""Application dependencies."""

from typing import Annotated

from fastapi import Depends

from blogpost.db import SessionMaker, async_session_maker
from blogpost.managers import CacheManager, cache_manager
from blogpost.services import CommentService, PostService


def build_services(
    session_maker: SessionMaker,
    cache: CacheManager,
) -> tuple[PostService, CommentService]:
    """Wire the services to a session factory and a cache."""
    return PostService(session_maker, cache), CommentService(session_maker)


_post_service, _comment_service = build_services(async_session_maker, cache_manager)


def get_post_service() -> PostService:
    return _post_service


def get_comment_service() -> CommentService:
    return _comment_service


PostServiceDep = Annotated[PostService, Depends(get_post_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
