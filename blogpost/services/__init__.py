from blogpost.services.comment_service import CommentService
from blogpost.services.post_service import PostService, unique_slug

__all__ = ["CommentService", "PostService", "unique_slug"]
