from blogpost.repositories.base import BaseRepository
from blogpost.repositories.comment import CommentRepository
from blogpost.repositories.post import SORT_FIELDS, PostRepository

__all__ = ["SORT_FIELDS", "BaseRepository", "CommentRepository", "PostRepository"]
