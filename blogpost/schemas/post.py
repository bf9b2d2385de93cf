"""Post input and response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogpost.configs.settings import (
    AUTHOR_MAX_LENGTH,
    AUTHOR_MIN_LENGTH,
    CONTENT_MIN_LENGTH,
    SUMMARY_MAX_LENGTH,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from blogpost.models import PostDB, PostStatus


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def check_title(value: str | None) -> str:
    if _is_blank(value):
        mssg = "Title is required"
        raise ValueError(mssg)
    if not TITLE_MIN_LENGTH <= len(value) <= TITLE_MAX_LENGTH:
        mssg = f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
        raise ValueError(mssg)
    return value


def check_content(value: str | None) -> str:
    if _is_blank(value):
        mssg = "Content is required"
        raise ValueError(mssg)
    if len(value) < CONTENT_MIN_LENGTH:
        mssg = f"Content must be at least {CONTENT_MIN_LENGTH} characters"
        raise ValueError(mssg)
    return value


def check_author(value: str | None) -> str:
    if _is_blank(value):
        mssg = "Author is required"
        raise ValueError(mssg)
    if not AUTHOR_MIN_LENGTH <= len(value) <= AUTHOR_MAX_LENGTH:
        mssg = (
            f"Author name must be between {AUTHOR_MIN_LENGTH} and {AUTHOR_MAX_LENGTH} characters"
        )
        raise ValueError(mssg)
    return value


def check_summary(value: str | None) -> str | None:
    if value is not None and len(value) > SUMMARY_MAX_LENGTH:
        mssg = f"Summary cannot exceed {SUMMARY_MAX_LENGTH} characters"
        raise ValueError(mssg)
    return value


def normalize_tags(value: Any) -> list[str]:
    """
    Trim tags, drop blanks and duplicates.

    First-seen order is kept. A single string is treated as a
    comma-separated list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    tags: list[str] = []
    for raw in value:
        if not isinstance(raw, str):
            mssg = "Tags must be strings"
            raise ValueError(mssg)  # noqa: TRY004
        tag = raw.strip()
        if not tag or tag in tags:
            continue
        if len(tag) > TAG_MAX_LENGTH:
            mssg = f"Tag cannot exceed {TAG_MAX_LENGTH} characters"
            raise ValueError(mssg)
        tags.append(tag)
    return tags


def parse_status(value: Any) -> Any:
    """Accept status names regardless of case."""
    if isinstance(value, str):
        return value.strip().upper()
    return value


class PostCreate(BaseModel):
    """Payload for creating a post."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Getting Started with FastAPI",
                "content": "FastAPI makes it easy to build typed HTTP APIs.",
                "author": "Jane Doe",
                "summary": "A short introduction",
                "tags": ["python", "fastapi"],
            },
        },
    )

    title: str | None = Field(default=None, validate_default=True, description="Post title")
    content: str | None = Field(default=None, validate_default=True, description="Post body")
    author: str | None = Field(default=None, validate_default=True, description="Author name")
    summary: str | None = Field(default=None, description="Optional excerpt")
    tags: list[str] = Field(default_factory=list, description="Tags for categorization")
    status: PostStatus | None = Field(
        default=None,
        description="Initial status, DRAFT when omitted",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        return check_title(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str:
        return check_content(v)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str | None) -> str:
        return check_author(v)

    @field_validator("summary")
    @classmethod
    def validate_summary(cls, v: str | None) -> str | None:
        return check_summary(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> list[str]:
        return normalize_tags(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return parse_status(v)


class PostUpdate(BaseModel):
    """Partial update of a post. Omitted (or null) fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    content: str | None = None
    author: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    status: PostStatus | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return None if v is None else check_title(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str | None:
        return None if v is None else check_content(v)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str | None) -> str | None:
        return None if v is None else check_author(v)

    @field_validator("summary")
    @classmethod
    def validate_summary(cls, v: str | None) -> str | None:
        return check_summary(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> list[str] | None:
        return None if v is None else normalize_tags(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        return parse_status(v)

    def changes(self) -> dict[str, Any]:
        """Fields supplied with a value."""
        return self.model_dump(exclude_none=True)


class PostResponse(BaseModel):
    """Post as returned to clients."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    slug: str
    content: str
    author: str
    summary: str | None = None
    status: PostStatus
    tags: list[str] = Field(default_factory=list)
    view_count: int = Field(default=0, alias="viewCount")
    comment_count: int = Field(default=0, alias="commentCount")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    published_at: datetime | None = Field(default=None, alias="publishedAt")

    @classmethod
    def from_db(cls, post: PostDB, comment_count: int = 0) -> "PostResponse":
        """Build the response from a loaded post."""
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            content=post.content,
            author=post.author,
            summary=post.summary,
            status=PostStatus(post.status),
            tags=sorted(post.tag_names),
            view_count=post.view_count,
            comment_count=comment_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
            published_at=post.published_at,
        )


class AuthorStat(BaseModel):
    """Number of posts written by one author."""

    model_config = ConfigDict(populate_by_name=True)

    author: str
    post_count: int = Field(alias="postCount")
