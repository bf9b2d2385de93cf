"""Database models for the application."""

from blogpost.models.comment import CommentDB
from blogpost.models.post import (
    PostDB,
    PostStatus,
    PostTagDB,
    derive_slug,
    increment_view_count,
    transition_status,
    utc_now,
)

__all__ = [
    "CommentDB",
    "PostDB",
    "PostStatus",
    "PostTagDB",
    "derive_slug",
    "increment_view_count",
    "transition_status",
    "utc_now",
]
