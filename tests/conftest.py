# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os

# Settings are read at import time, so the test environment must be in place
# before anything from blogpost is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["CACHE_ENABLED"] = "true"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine  # noqa: E402

from blogpost.clients import MemoryClient  # noqa: E402
from blogpost.configs import CacheConfig  # noqa: E402
from blogpost.db import SessionMaker, build_engine, build_session_maker, drop_db  # noqa: E402
from blogpost.db.database import init_db  # noqa: E402
from blogpost.dependencies import build_services, get_comment_service, get_post_service  # noqa: E402
from blogpost.main import app  # noqa: E402
from blogpost.managers import CacheManager  # noqa: E402
from blogpost.schemas import PostResponse  # noqa: E402
from blogpost.services import CommentService, PostService  # noqa: E402

type PostFactory = Callable[..., Awaitable[PostResponse]]


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    test_engine = build_engine("sqlite+aiosqlite://")
    await init_db(test_engine)
    yield test_engine
    await drop_db(test_engine)
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> SessionMaker:
    return build_session_maker(engine)


@pytest.fixture
def memory_client() -> MemoryClient:
    """
    Create an in-memory cache client for testing.

    Use this fixture for testing cache operations without Redis dependency.
    """
    return MemoryClient()


@pytest.fixture
async def cache(memory_client: MemoryClient) -> AsyncGenerator[CacheManager]:
    """Cache manager on the in-memory client, emptied after each test."""
    manager = CacheManager(CacheConfig(enabled=True), memory_client=memory_client)
    try:
        await manager.initialize()
        yield manager
    finally:
        await manager.shutdown()


@pytest.fixture
def services(session_maker: SessionMaker, cache: CacheManager) -> tuple[PostService, CommentService]:
    return build_services(session_maker, cache)


@pytest.fixture
def post_service(services: tuple[PostService, CommentService]) -> PostService:
    return services[0]


@pytest.fixture
def comment_service(services: tuple[PostService, CommentService]) -> CommentService:
    return services[1]


@pytest.fixture
def post_payload() -> dict[str, Any]:
    return {
        "title": "Welcome to Our Blog",
        "content": "This is the very first post on the blog.",
        "author": "Jane Doe",
        "summary": "A short introduction",
        "tags": ["news", "intro"],
    }


@pytest.fixture
def make_post(post_service: PostService, post_payload: dict[str, Any]) -> PostFactory:
    """Create a post, optionally published, overriding any payload field."""

    async def factory(*, publish: bool = False, **overrides: Any) -> PostResponse:
        post = await post_service.create_post(post_payload | overrides)
        if publish:
            post = await post_service.publish_post(post.id)
        return post

    return factory


@pytest.fixture
async def client(
    post_service: PostService,
    comment_service: CommentService,
) -> AsyncGenerator[AsyncClient]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    The service dependencies are pointed at the per-test database and cache.
    """
    app.dependency_overrides[get_post_service] = lambda: post_service
    app.dependency_overrides[get_comment_service] = lambda: comment_service
    try:
        async with AsyncClient(
            base_url="http://test",
            transport=ASGITransport(app=app),
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
