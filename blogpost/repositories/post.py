"""Post repository: the query contract of the post store."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, desc, distinct, func, or_, select, update

from blogpost.errors import ValidationError
from blogpost.models import PostDB, PostStatus, PostTagDB, utc_now
from blogpost.repositories.base import BaseRepository, PageResult
from blogpost.repositories.comment import CommentRepository

SORT_COLUMNS: dict[str, Any] = {
    "id": PostDB.id,
    "title": PostDB.title,
    "author": PostDB.author,
    "status": PostDB.status,
    "viewCount": PostDB.view_count,
    "createdAt": PostDB.created_at,
    "updatedAt": PostDB.updated_at,
    "publishedAt": PostDB.published_at,
}
SORT_COLUMNS.update(
    {
        "view_count": PostDB.view_count,
        "created_at": PostDB.created_at,
        "updated_at": PostDB.updated_at,
        "published_at": PostDB.published_at,
    },
)
SORT_FIELDS = ("id", "title", "author", "status", "viewCount", "createdAt", "updatedAt", "publishedAt")


def _ordered(statement: Select[Any], column: Any = PostDB.created_at, *, descending: bool = True) -> Select[Any]:
    # id breaks ties so that page boundaries are stable
    if descending:
        return statement.order_by(desc(column), desc(PostDB.id))
    return statement.order_by(column, PostDB.id)


def _contains(column: Any, needle: str) -> ColumnElement[bool]:
    """Case-insensitive substring match with LIKE wildcards escaped."""
    return func.lower(column).contains(needle.lower(), autoescape=True)


class PostRepository(BaseRepository[PostDB]):
    """
    Repository for post database operations.

    Every finder returns ``(items, total)``; items are ordered newest first
    unless ``find_all`` is given another sort.
    """

    model = PostDB

    async def get_by_id_for_update(self, post_id: int) -> PostDB | None:
        """Load a post and lock its row until the transaction ends."""
        statement = select(PostDB).where(PostDB.id == post_id).with_for_update()
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> PostDB | None:
        result = await self.session.execute(select(PostDB).where(PostDB.slug == slug))
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        """
        Check whether a slug is taken.

        Args:
            slug: Slug to look for
            exclude_id: Post to ignore (the one being renamed)

        Returns:
            bool: True if another post uses the slug
        """
        statement = select(1).where(PostDB.slug == slug)
        if exclude_id is not None:
            statement = statement.where(PostDB.id != exclude_id)
        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none() is not None

    async def find_all(
        self,
        page: int,
        size: int,
        sort_field: str = "createdAt",
        sort_direction: str = "desc",
    ) -> PageResult[PostDB]:
        """
        Page through every post.

        Args:
            page: Zero-based page index
            size: Page size
            sort_field: One of ``SORT_FIELDS`` (snake_case accepted)
            sort_direction: ``desc`` (any case) for descending, anything else ascending

        Raises:
            ValidationError: If the sort field is unknown
        """
        column = SORT_COLUMNS.get(sort_field)
        if column is None:
            raise ValidationError(
                detail=f"Invalid sort field: {sort_field}",
                errors=[
                    {
                        "field": "sortBy",
                        "message": f"Sort field must be one of: {', '.join(SORT_FIELDS)}",
                        "type": "value_error",
                    },
                ],
            )
        descending = sort_direction.lower() == "desc"
        return await self._paginate(_ordered(select(PostDB), column, descending=descending), page, size)

    async def find_by_status(self, status: PostStatus, page: int, size: int) -> PageResult[PostDB]:
        statement = _ordered(select(PostDB).where(PostDB.status == status))
        return await self._paginate(statement, page, size)

    async def find_by_author_contains(self, author: str, page: int, size: int) -> PageResult[PostDB]:
        statement = _ordered(select(PostDB).where(_contains(PostDB.author, author)))
        return await self._paginate(statement, page, size)

    async def search_published(self, keyword: str, page: int, size: int) -> PageResult[PostDB]:
        """Published posts whose title or content contains the keyword, ignoring case."""
        statement = select(PostDB).where(
            PostDB.status == PostStatus.PUBLISHED,
            or_(_contains(PostDB.title, keyword), _contains(PostDB.content, keyword)),
        )
        return await self._paginate(_ordered(statement), page, size)

    async def find_by_tags_and_status(
        self,
        tags: Sequence[str],
        status: PostStatus,
        page: int,
        size: int,
    ) -> PageResult[PostDB]:
        """Posts with the given status carrying at least one of the tags."""
        if not tags:
            return [], 0
        tagged = select(PostTagDB.post_id).where(PostTagDB.tag.in_(list(tags)))
        statement = select(PostDB).where(PostDB.status == status, PostDB.id.in_(tagged))
        return await self._paginate(_ordered(statement), page, size)

    async def distinct_tags_by_status(self, status: PostStatus) -> list[str]:
        statement = (
            select(distinct(PostTagDB.tag))
            .join(PostDB, PostDB.id == PostTagDB.post_id)
            .where(PostDB.status == status)
            .order_by(PostTagDB.tag)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_by_status(self, status: PostStatus) -> int:
        return await self._count(select(PostDB.id).where(PostDB.status == status))

    async def count_by_author(self, status: PostStatus | None = None) -> list[tuple[str, int]]:
        """Post count per author, largest first."""
        post_count = func.count(PostDB.id).label("post_count")
        statement = select(PostDB.author, post_count).group_by(PostDB.author)
        if status is not None:
            statement = statement.where(PostDB.status == status)
        statement = statement.order_by(desc(post_count), PostDB.author)
        result = await self.session.execute(statement)
        return [(author, count) for author, count in result.all()]

    async def set_tags(self, post: PostDB, tags: Sequence[str]) -> PostDB:
        """
        Replace the tag set of a post.

        Only the difference is written, unchanged tags keep their rows.
        """
        wanted = list(dict.fromkeys(tags))
        for link in list(post.tag_links):
            if link.tag not in wanted:
                post.tag_links.remove(link)
        current = post.tag_names
        post.tag_links.extend(PostTagDB(tag=tag) for tag in wanted if tag not in current)
        return post

    async def increment_view_count(self, post_id: int) -> bool:
        """Atomically add one view and touch the post. False if the post does not exist."""
        statement = (
            update(PostDB)
            .where(PostDB.id == post_id)
            .values(view_count=PostDB.view_count + 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount > 0

    async def delete(self, post: PostDB) -> None:
        """Delete a post after its comments; tag rows go with the post."""
        await CommentRepository(self.session).delete_by_post_id(post.id)
        await self.session.delete(post)
        await self.session.flush()
