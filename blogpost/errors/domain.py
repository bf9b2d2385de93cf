"""Domain errors raised by the post and comment services."""

from logging import getLogger

from starlette.status import HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from blogpost.configs import file_logger
from blogpost.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class NotFoundError(BaseAppError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(detail, HTTP_404_NOT_FOUND)


class PostNotFoundError(NotFoundError):
    """Raised when no post matches the requested id or slug."""

    def __init__(self, post_id: int | str) -> None:
        super().__init__(f"Blog post not found with id: {post_id}")
        self.post_id = post_id


class CommentNotFoundError(NotFoundError):
    """Raised when no comment matches the requested id."""

    def __init__(self, comment_id: int) -> None:
        super().__init__(f"Comment not found with id: {comment_id}")
        self.comment_id = comment_id


class ConflictError(BaseAppError):
    """Raised when a write collides with existing state."""

    def __init__(self, detail: str = "Conflict") -> None:
        super().__init__(detail, HTTP_409_CONFLICT)


class SlugConflictError(ConflictError):
    """Raised when a derived slug is already taken by another post."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Blog post with slug '{slug}' already exists")
        self.slug = slug


domain_exception_handler = create_exception_handler(logger)
