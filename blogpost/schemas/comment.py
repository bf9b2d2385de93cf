"""Comment input and response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogpost.configs.settings import (
    COMMENT_AUTHOR_MAX_LENGTH,
    COMMENT_AUTHOR_MIN_LENGTH,
    COMMENT_EMAIL_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
    COMMENT_MIN_LENGTH,
)
from blogpost.models import CommentDB


def check_comment_content(value: str | None) -> str:
    if value is None or not value.strip():
        mssg = "Content is required"
        raise ValueError(mssg)
    if not COMMENT_MIN_LENGTH <= len(value) <= COMMENT_MAX_LENGTH:
        mssg = f"Comment must be between {COMMENT_MIN_LENGTH} and {COMMENT_MAX_LENGTH} characters"
        raise ValueError(mssg)
    return value


def check_author_name(value: str | None) -> str:
    if value is None or not value.strip():
        mssg = "Author name is required"
        raise ValueError(mssg)
    if not COMMENT_AUTHOR_MIN_LENGTH <= len(value) <= COMMENT_AUTHOR_MAX_LENGTH:
        mssg = (
            "Author name must be between "
            f"{COMMENT_AUTHOR_MIN_LENGTH} and {COMMENT_AUTHOR_MAX_LENGTH} characters"
        )
        raise ValueError(mssg)
    return value


def check_author_email(value: str | None) -> str | None:
    if value is not None and len(value) > COMMENT_EMAIL_MAX_LENGTH:
        mssg = f"Email cannot exceed {COMMENT_EMAIL_MAX_LENGTH} characters"
        raise ValueError(mssg)
    return value


class CommentCreate(BaseModel):
    """Payload for adding a comment to a post."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "content": "Great post, thanks for sharing!",
                "authorName": "John Smith",
                "authorEmail": "john@example.com",
            },
        },
    )

    content: str | None = Field(default=None, validate_default=True)
    author_name: str | None = Field(default=None, alias="authorName", validate_default=True)
    author_email: str | None = Field(default=None, alias="authorEmail")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str:
        return check_comment_content(v)

    @field_validator("author_name")
    @classmethod
    def validate_author_name(cls, v: str | None) -> str:
        return check_author_name(v)

    @field_validator("author_email")
    @classmethod
    def validate_author_email(cls, v: str | None) -> str | None:
        return check_author_email(v)


class CommentUpdate(CommentCreate):
    """
    Replacement text and author details of a comment.

    Every field is overwritten, so an omitted email clears the stored one.
    The owning post cannot be changed.
    """

    def changes(self) -> dict[str, str | None]:
        """Column values to assign, the email included even when empty."""
        return self.model_dump(include={"content", "author_name", "author_email"})


class CommentResponse(BaseModel):
    """Comment as returned to clients."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    content: str
    author_name: str = Field(alias="authorName")
    author_email: str | None = Field(default=None, alias="authorEmail")
    post_id: int = Field(alias="postId")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_db(cls, comment: CommentDB) -> "CommentResponse":
        return cls(
            id=comment.id,
            content=comment.content,
            author_name=comment.author_name,
            author_email=comment.author_email,
            post_id=comment.post_id,
            created_at=comment.created_at,
        )
