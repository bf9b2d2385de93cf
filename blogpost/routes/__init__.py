from blogpost.routes.comment import router as comment_router
from blogpost.routes.post import router as post_router

__all__ = ["comment_router", "post_router"]
