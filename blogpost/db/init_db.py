"""
Database initialization and sample data.

Creates the tables and, outside the test environment, fills an empty store
with a few sample posts so a fresh instance has something to list, search
and filter. Runs at application startup and can be run on its own:

    python -m blogpost.db.init_db

Note:
    Production schema changes are managed by Alembic migrations.
    Run 'alembic upgrade head' to apply them.
"""

from asyncio import run as asyncio_run
from logging import getLogger
from typing import Any

from blogpost.configs import file_logger
from blogpost.db.database import async_session_maker, close_db, init_db
from blogpost.errors import DatabaseInitializationError
from blogpost.managers import cache_manager
from blogpost.services import PostService

logger = file_logger(getLogger(__name__))

SAMPLE_POSTS: list[dict[str, Any]] = [
    {
        "title": "Welcome to Our Blog",
        "content": (
            "This is our first blog post. We're excited to share our thoughts and "
            "ideas with you. Stay tuned for more exciting content!"
        ),
        "author": "Admin",
        "summary": "Welcome post introducing our new blog",
        "status": "PUBLISHED",
        "tags": ["welcome", "introduction", "blog"],
    },
    {
        "title": "FastAPI Best Practices",
        "content": (
            "In this post, we'll explore the best practices for developing FastAPI "
            "applications. We'll cover topics like dependency injection, "
            "configuration, testing, and more."
        ),
        "author": "John Developer",
        "summary": "A comprehensive guide to FastAPI best practices",
        "status": "PUBLISHED",
        "tags": ["fastapi", "python", "development", "best-practices"],
    },
    {
        "title": "Microservices Architecture",
        "content": (
            "This is a draft post about microservices architecture. We'll discuss "
            "the benefits, challenges, and implementation strategies."
        ),
        "author": "Jane Architect",
        "summary": "Understanding microservices architecture",
        "status": "DRAFT",
        "tags": ["microservices", "architecture", "distributed-systems"],
    },
]


async def seed_sample_posts(service: PostService) -> int:
    """
    Create the sample posts when the store holds no post at all.

    Args:
        service: Post service used to create the posts.

    Returns:
        int: Number of posts created, 0 when posts already existed.
    """
    if await service.count_posts():
        logger.info("Posts already present, skipping sample data.")
        return 0

    for payload in SAMPLE_POSTS:
        await service.create_post(payload)
    logger.info(f"Created {len(SAMPLE_POSTS)} sample posts.")
    return len(SAMPLE_POSTS)


async def main() -> None:
    """Create the tables and the sample posts."""
    try:
        logger.info("Initializing database...")
        await init_db()
        await cache_manager.initialize()
        await seed_sample_posts(PostService(async_session_maker, cache_manager))
        logger.info("Database ready!")
    except Exception as e:
        logger.exception("Failed to initialize database")
        raise DatabaseInitializationError from e
    finally:
        await cache_manager.shutdown()
        await close_db()


if __name__ == "__main__":
    asyncio_run(main())
