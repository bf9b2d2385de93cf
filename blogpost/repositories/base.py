"""Base repository for database operations."""

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from blogpost.errors.database import DatabaseError, DuplicateEntryError

type PageResult[ModelT] = tuple[list[ModelT], int]


class BaseRepository[ModelT: SQLModel]:
    """
    Base repository implementing the queries every entity shares.

    Subclasses set ``model`` and build their own filtered statements, then
    hand them to ``_paginate`` to get one page plus the total match count.

    Attributes:
        model: The SQLModel database model type.
        id_field: The name of the primary key field (default: "id").
    """

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def get_by_id(self, record_id: int, *, refresh: bool = False) -> ModelT | None:
        """
        Get a record by its ID.

        Args:
            record_id: Record ID
            refresh: Overwrite the identity-map copy with the stored row

        Returns:
            ModelT | None: Record if found, None otherwise
        """
        id_column = getattr(self.model, self.id_field)
        statement = select(self.model).where(id_column == record_id)
        if refresh:
            statement = statement.execution_options(populate_existing=True)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def save(self, record: ModelT) -> ModelT:
        """
        Add a record and flush it so generated columns are populated.

        Raises:
            DuplicateEntryError: If a unique constraint is violated
            DatabaseError: For other integrity errors
        """
        try:
            self.session.add(record)
            await self.session.flush()
        except IntegrityError as e:
            error_msg = str(e.orig) if e.orig else str(e)
            if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
                raise DuplicateEntryError(detail=error_msg) from e
            raise DatabaseError(detail=f"Database integrity error: {error_msg}") from e
        return record

    async def count(self) -> int:
        """Total number of stored records."""
        return await self._count(select(self.model))

    async def _count(self, statement: Select[Any]) -> int:
        count_statement = select(func.count()).select_from(
            statement.order_by(None).subquery(),
        )
        result = await self.session.execute(count_statement)
        return result.scalar() or 0

    async def _paginate(self, statement: Select[Any], page: int, size: int) -> PageResult[ModelT]:
        """
        Run an ordered statement for one page.

        Args:
            statement: Filtered and ordered select of ``model``
            page: Zero-based page index
            size: Page size

        Returns:
            tuple: The page items and the total number of matches
        """
        total = await self._count(statement)
        if total == 0:
            return [], 0
        result = await self.session.execute(statement.offset(page * size).limit(size))
        return list(result.scalars().all()), total
