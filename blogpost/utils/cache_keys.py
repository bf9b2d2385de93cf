"""
Cache namespaces and key builders for the post read paths.

Services build keys through these helpers so reads and invalidations always
agree on where an entry lives.
"""

PUBLISHED_POSTS_NAMESPACE = "published_posts"
POST_BY_SLUG_NAMESPACE = "post_by_slug"
ALL_TAGS_NAMESPACE = "all_tags"

ALL_TAGS_KEY = "all"


def published_posts_key(page: int, size: int) -> str:
    """Generate cache key for a page of published posts."""
    return f"{page}-{size}"


def post_by_slug_key(slug: str) -> str:
    """Generate cache key for a post looked up by slug."""
    return slug
