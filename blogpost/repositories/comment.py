"""Comment repository."""

from collections.abc import Iterable

from sqlalchemy import delete, desc, func, select

from blogpost.models import CommentDB
from blogpost.repositories.base import BaseRepository, PageResult


class CommentRepository(BaseRepository[CommentDB]):
    """Repository for comment database operations."""

    model = CommentDB

    async def find_by_post_id(self, post_id: int, page: int, size: int) -> PageResult[CommentDB]:
        """Comments of a post, newest first."""
        statement = (
            select(CommentDB)
            .where(CommentDB.post_id == post_id)
            .order_by(desc(CommentDB.created_at), desc(CommentDB.id))
        )
        return await self._paginate(statement, page, size)

    async def count_by_post_id(self, post_id: int) -> int:
        return await self._count(select(CommentDB.id).where(CommentDB.post_id == post_id))

    async def count_by_post_ids(self, post_ids: Iterable[int]) -> dict[int, int]:
        """
        Count comments for several posts in one query.

        Posts without comments are reported with 0.
        """
        ids = list(post_ids)
        if not ids:
            return {}
        statement = (
            select(CommentDB.post_id, func.count(CommentDB.id))
            .where(CommentDB.post_id.in_(ids))
            .group_by(CommentDB.post_id)
        )
        result = await self.session.execute(statement)
        counts = dict.fromkeys(ids, 0)
        counts.update({post_id: count for post_id, count in result.all()})
        return counts

    async def delete(self, comment: CommentDB) -> None:
        await self.session.delete(comment)
        await self.session.flush()

    async def delete_by_post_id(self, post_id: int) -> int:
        result = await self.session.execute(delete(CommentDB).where(CommentDB.post_id == post_id))
        return result.rowcount
