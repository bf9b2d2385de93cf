"""
Post use cases.

Each write runs in exactly one transaction. Cache namespaces touched by a
write are invalidated once that transaction has committed.
"""

from collections.abc import Mapping, Sequence
from logging import getLogger
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from blogpost.configs import file_logger
from blogpost.db import SessionMaker, transaction
from blogpost.errors import DuplicateEntryError, PostNotFoundError, SlugConflictError, ValidationError
from blogpost.managers import CacheManager
from blogpost.models import PostDB, PostStatus, derive_slug, transition_status
from blogpost.repositories import CommentRepository, PostRepository
from blogpost.schemas import (
    AuthorStat,
    PageResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    validate_payload,
)
from blogpost.utils.cache_keys import (
    ALL_TAGS_KEY,
    ALL_TAGS_NAMESPACE,
    POST_BY_SLUG_NAMESPACE,
    PUBLISHED_POSTS_NAMESPACE,
    post_by_slug_key,
    published_posts_key,
)

logger = file_logger(getLogger(__name__))

type PostPage = PageResponse[PostResponse]

FALLBACK_SLUG = "post"


def _status(value: PostStatus | str) -> PostStatus:
    try:
        return PostStatus(str(value).upper())
    except ValueError as e:
        raise ValidationError(
            errors=[
                {
                    "field": "status",
                    "message": f"Status must be one of: {', '.join(PostStatus)}",
                    "type": "enum",
                },
            ],
        ) from e


async def unique_slug(repo: PostRepository, title: str, exclude_id: int | None = None) -> str:
    """
    Derive a free slug for a title.

    A taken slug gets the first free numeric suffix: ``hello-world``,
    ``hello-world-2``, ``hello-world-3`` and so on.
    """
    base = derive_slug(title) or FALLBACK_SLUG
    candidate, suffix = base, 2
    while await repo.slug_exists(candidate, exclude_id):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


class PostService:
    """Post operations over the post store and the read cache."""

    def __init__(self, session_maker: SessionMaker, cache: CacheManager) -> None:
        self.session_maker = session_maker
        self.cache = cache

    async def _to_response(self, session: AsyncSession, post: PostDB) -> PostResponse:
        comment_count = await CommentRepository(session).count_by_post_id(post.id)
        return PostResponse.from_db(post, comment_count)

    async def _to_page(
        self,
        session: AsyncSession,
        result: tuple[list[PostDB], int],
        page: int,
        size: int,
    ) -> PostPage:
        posts, total = result
        counts = await CommentRepository(session).count_by_post_ids(post.id for post in posts)
        content = [PostResponse.from_db(post, counts.get(post.id, 0)) for post in posts]
        return PageResponse[PostResponse].build(content, total, page, size)

    async def _save(self, repo: PostRepository, post: PostDB) -> PostDB:
        try:
            return await repo.save(post)
        except DuplicateEntryError as e:
            # Another writer took the slug between the check and the flush
            raise SlugConflictError(post.slug) from e

    async def _get_for_update(self, repo: PostRepository, post_id: int) -> PostDB:
        post = await repo.get_by_id_for_update(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    # --- Reads ---

    async def get_all_posts(
        self,
        page: int = 0,
        size: int = 10,
        sort_by: str = "createdAt",
        sort_dir: str = "desc",
    ) -> PostPage:
        """Every post, sorted by any sortable field."""
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).find_all(page, size, sort_by, sort_dir)
            return await self._to_page(session, result, page, size)

    async def _load_published_posts(self, page: int, size: int) -> dict[str, Any]:
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).find_by_status(PostStatus.PUBLISHED, page, size)
            posts = await self._to_page(session, result, page, size)
        return posts.model_dump(mode="json")

    async def get_published_posts(self, page: int = 0, size: int = 10) -> PostPage:
        """Published posts, newest first. Cached per page and size."""
        data = await self.cache.get_or_set(
            published_posts_key(page, size),
            lambda: self._load_published_posts(page, size),
            namespace=PUBLISHED_POSTS_NAMESPACE,
        )
        return PageResponse[PostResponse].model_validate(data)

    async def get_post_by_id(self, post_id: int) -> PostResponse | None:
        async with transaction(self.session_maker) as session:
            post = await PostRepository(session).get_by_id(post_id)
            if post is None:
                return None
            return await self._to_response(session, post)

    async def _load_post_by_slug(self, slug: str) -> dict[str, Any] | None:
        async with transaction(self.session_maker) as session:
            post = await PostRepository(session).get_by_slug(slug)
            if post is None:
                return None
            response = await self._to_response(session, post)
        return response.model_dump(mode="json")

    async def get_post_by_slug(self, slug: str) -> PostResponse | None:
        """Post with the given slug, cached. Misses are never cached."""
        data = await self.cache.get_or_set(
            post_by_slug_key(slug),
            lambda: self._load_post_by_slug(slug),
            namespace=POST_BY_SLUG_NAMESPACE,
        )
        return None if data is None else PostResponse.model_validate(data)

    async def get_posts_by_author(self, author: str, page: int = 0, size: int = 10) -> PostPage:
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).find_by_author_contains(author, page, size)
            return await self._to_page(session, result, page, size)

    async def search_posts(self, keyword: str, page: int = 0, size: int = 10) -> PostPage:
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).search_published(keyword, page, size)
            return await self._to_page(session, result, page, size)

    async def get_posts_by_tags(self, tags: Sequence[str], page: int = 0, size: int = 10) -> PostPage:
        """Published posts carrying any of the tags."""
        wanted = [tag.strip() for tag in tags if tag and tag.strip()]
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).find_by_tags_and_status(
                wanted,
                PostStatus.PUBLISHED,
                page,
                size,
            )
            return await self._to_page(session, result, page, size)

    async def get_posts_by_status(
        self,
        status: PostStatus | str,
        page: int = 0,
        size: int = 10,
    ) -> PostPage:
        async with transaction(self.session_maker) as session:
            result = await PostRepository(session).find_by_status(_status(status), page, size)
            return await self._to_page(session, result, page, size)

    async def _load_all_tags(self) -> list[str]:
        async with transaction(self.session_maker) as session:
            return await PostRepository(session).distinct_tags_by_status(PostStatus.PUBLISHED)

    async def get_all_tags(self) -> list[str]:
        """Sorted tags of published posts. Cached."""
        return await self.cache.get_or_set(
            ALL_TAGS_KEY,
            self._load_all_tags,
            namespace=ALL_TAGS_NAMESPACE,
        )

    async def count_posts(self) -> int:
        """Number of posts in any status."""
        async with transaction(self.session_maker) as session:
            return await PostRepository(session).count()

    async def get_post_count(self, status: PostStatus | str) -> int:
        async with transaction(self.session_maker) as session:
            return await PostRepository(session).count_by_status(_status(status))

    async def get_author_stats(self, status: PostStatus | str | None = None) -> list[AuthorStat]:
        """Number of posts per author, most prolific first."""
        wanted = None if status is None else _status(status)
        async with transaction(self.session_maker) as session:
            rows = await PostRepository(session).count_by_author(wanted)
        return [AuthorStat(author=author, post_count=count) for author, count in rows]

    # --- Writes ---

    async def create_post(self, data: PostCreate | Mapping[str, Any]) -> PostResponse:
        """
        Create a post.

        Args:
            data: Post payload, validated before anything is written.

        Returns:
            PostResponse: The stored post.

        Raises:
            ValidationError: If the payload violates any field constraint.
            SlugConflictError: If a concurrent write took the derived slug.
        """
        payload = validate_payload(PostCreate, data)
        async with transaction(self.session_maker) as session:
            repo = PostRepository(session)
            post = PostDB(
                title=payload.title,
                slug=await unique_slug(repo, payload.title),
                content=payload.content,
                author=payload.author,
                summary=payload.summary,
                status=PostStatus.DRAFT,
                view_count=0,
            )
            if payload.status is not None:
                transition_status(post, payload.status)
            await repo.set_tags(post, payload.tags)
            await self._save(repo, post)
            response = PostResponse.from_db(post)

        await self.cache.invalidate(PUBLISHED_POSTS_NAMESPACE, ALL_TAGS_NAMESPACE)
        logger.info(f"Created post {response.id} with slug '{response.slug}'")
        return response

    async def update_post(self, post_id: int, data: PostUpdate | Mapping[str, Any]) -> PostResponse:
        """
        Apply the supplied fields to a post.

        A new title re-derives the slug. ``created_at``, ``view_count`` and
        the comments are never touched.

        Raises:
            ValidationError: If a supplied field is invalid.
            PostNotFoundError: If the post does not exist.
        """
        payload = validate_payload(PostUpdate, data)
        changes = payload.changes()
        async with transaction(self.session_maker) as session:
            repo = PostRepository(session)
            post = await self._get_for_update(repo, post_id)

            if "title" in changes and changes["title"] != post.title:
                post.title = changes["title"]
                post.slug = await unique_slug(repo, post.title, exclude_id=post.id)
            for field in ("content", "author", "summary"):
                if field in changes:
                    setattr(post, field, changes[field])
            if payload.tags is not None:
                await repo.set_tags(post, payload.tags)
            if payload.status is not None and payload.status != post.status:
                transition_status(post, payload.status)

            post.touch()
            await self._save(repo, post)
            response = await self._to_response(session, post)

        await self.cache.invalidate(
            PUBLISHED_POSTS_NAMESPACE,
            POST_BY_SLUG_NAMESPACE,
            ALL_TAGS_NAMESPACE,
        )
        logger.info(f"Updated post {post_id}")
        return response

    async def _change_status(self, post_id: int, status: PostStatus) -> PostResponse:
        async with transaction(self.session_maker) as session:
            repo = PostRepository(session)
            post = await self._get_for_update(repo, post_id)
            transition_status(post, status)
            await self._save(repo, post)
            response = await self._to_response(session, post)

        # The tag listing is left alone here, only create/update/delete clear it
        await self.cache.invalidate(PUBLISHED_POSTS_NAMESPACE, POST_BY_SLUG_NAMESPACE)
        logger.info(f"Post {post_id} moved to {status}")
        return response

    async def publish_post(self, post_id: int) -> PostResponse:
        """Publish a post. The first publication time is kept on republish."""
        return await self._change_status(post_id, PostStatus.PUBLISHED)

    async def archive_post(self, post_id: int) -> PostResponse:
        return await self._change_status(post_id, PostStatus.ARCHIVED)

    async def delete_post(self, post_id: int) -> None:
        """Delete a post with its comments and tags."""
        async with transaction(self.session_maker) as session:
            repo = PostRepository(session)
            post = await self._get_for_update(repo, post_id)
            await repo.delete(post)

        await self.cache.invalidate(
            PUBLISHED_POSTS_NAMESPACE,
            POST_BY_SLUG_NAMESPACE,
            ALL_TAGS_NAMESPACE,
        )
        logger.info(f"Deleted post {post_id}")

    async def increment_view_count(self, post_id: int) -> PostResponse:
        """
        Add one view to a post.

        The counter is incremented in a single UPDATE statement so concurrent
        calls never lose a view. Cached listings are not invalidated.
        """
        async with transaction(self.session_maker) as session:
            repo = PostRepository(session)
            if not await repo.increment_view_count(post_id):
                raise PostNotFoundError(post_id)
            post = await repo.get_by_id(post_id, refresh=True)
            if post is None:
                raise PostNotFoundError(post_id)
            return await self._to_response(session, post)
