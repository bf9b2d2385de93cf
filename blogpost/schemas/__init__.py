from blogpost.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from blogpost.schemas.common import PageResponse, validate_payload
from blogpost.schemas.post import AuthorStat, PostCreate, PostResponse, PostUpdate

__all__ = [
    "AuthorStat",
    "CommentCreate",
    "CommentResponse",
    "CommentUpdate",
    "PageResponse",
    "PostCreate",
    "PostResponse",
    "PostUpdate",
    "validate_payload",
]
