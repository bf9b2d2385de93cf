"""Comment database model."""

from datetime import datetime
from typing import cast

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from blogpost.models.post import utc_now


class CommentDB(SQLModel, table=True):
    """
    Comment database model.

    A comment always belongs to exactly one post. The foreign key cascades on
    delete, and the post repository also removes comments explicitly so the
    behavior does not depend on the database enforcing it.
    """

    __tablename__ = cast("declared_attr[str]", "comments")

    id: int | None = Field(default=None, primary_key=True, description="Comment ID")

    content: str = Field(
        sa_column=Column(String(500), nullable=False),
        description="Comment body",
    )
    author_name: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Commenter display name",
    )
    author_email: str | None = Field(
        default=None,
        sa_column=Column(String(100)),
        description="Commenter email",
    )

    # Foreign key to Post
    post_id: int = Field(
        sa_column=Column(
            "post_id",
            Integer,
            ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Parent post ID",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
