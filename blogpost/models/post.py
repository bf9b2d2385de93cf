"""Post database models and the post lifecycle rules."""

from datetime import UTC, datetime
from enum import StrEnum
from re import ASCII, sub
from typing import cast

from pydantic import ConfigDict
from sqlalchemy import DateTime, Index, Integer, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, Relationship, SQLModel, String


class PostStatus(StrEnum):
    """Lifecycle status of a post."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(tz=UTC)


def derive_slug(title: str) -> str:
    """
    Derive the URL slug for a title.

    Lowercases the title, strips everything that is not an ASCII letter,
    digit or whitespace, turns whitespace runs into single hyphens and trims
    hyphens from both ends.

    Args:
        title: Post title.

    Returns:
        str: Slug made of ``[a-z0-9-]`` only, possibly empty.
    """
    slug = title.lower()
    slug = sub(r"[^a-z0-9\s]", "", slug, flags=ASCII)
    slug = sub(r"\s+", "-", slug, flags=ASCII)
    slug = sub(r"-+", "-", slug)
    return slug.strip("-")


class PostTagDB(SQLModel, table=True):
    """A single tag attached to a post."""

    __tablename__ = cast("declared_attr[str]", "post_tags")

    post_id: int = Field(
        sa_column=Column(
            "post_id",
            Integer,
            ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    tag: str = Field(
        sa_column=Column(String(50), primary_key=True, index=True),
    )

    post: "PostDB" = Relationship(back_populates="tag_links")


class PostDB(SQLModel, table=True):
    """
    Post database model.

    Tags live in the ``post_tags`` table and are loaded together with the
    post. Comments reference the post through ``comments.post_id`` and are
    queried explicitly by the comment repository.
    """

    __tablename__ = cast("declared_attr[str]", "posts")

    __table_args__ = (
        Index("ix_posts_status_created", "status", "created_at"),
        Index("ix_posts_author", "author"),
    )

    id: int | None = Field(default=None, primary_key=True, description="Post ID")

    title: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Post title",
    )
    slug: str = Field(
        sa_column=Column(String(120), unique=True, nullable=False, index=True),
        description="URL-friendly slug (unique)",
    )
    content: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Post content",
    )
    author: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Author display name",
    )
    summary: str | None = Field(
        default=None,
        sa_column=Column(String(200)),
        description="Post summary/excerpt",
    )
    status: str = Field(
        default=PostStatus.DRAFT,
        sa_column=Column(String(20), nullable=False, index=True),
        description="Post status (DRAFT, PUBLISHED, ARCHIVED)",
    )
    view_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="View count",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Last update timestamp",
    )
    published_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
        description="First publication timestamp",
    )

    tag_links: list[PostTagDB] = Relationship(
        back_populates="post",
        sa_relationship_kwargs={"lazy": "selectin", "cascade": "all, delete-orphan"},
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Welcome to Our Blog",
                "slug": "welcome-to-our-blog",
                "content": "This is the very first post on the blog.",
                "author": "Jane Doe",
                "summary": "A short introduction",
                "status": "DRAFT",
                "view_count": 0,
            },
        },
    )

    @property
    def tag_names(self) -> set[str]:
        """Tags attached to the post."""
        return {link.tag for link in self.tag_links}

    def touch(self) -> None:
        """Stamp the post as modified."""
        self.updated_at = utc_now()


def transition_status(post: PostDB, new_status: PostStatus) -> PostDB:
    """
    Move a post to a new status.

    The first move to PUBLISHED stamps ``published_at``; later moves never
    clear or overwrite it. Backward moves are not rejected here.

    Args:
        post: Post to change.
        new_status: Target status.

    Returns:
        PostDB: The same post.
    """
    post.status = new_status
    if new_status == PostStatus.PUBLISHED and post.published_at is None:
        post.published_at = utc_now()
    post.touch()
    return post


def increment_view_count(post: PostDB) -> PostDB:
    """Add one view to the in-memory post."""
    post.view_count += 1
    return post
