"""Shared schema helpers: the page envelope and payload validation."""

from collections.abc import Mapping, Sequence
from math import ceil
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from blogpost.errors import ValidationError


class PageResponse[T](BaseModel):
    """One page of a larger ordered result set."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[T] = Field(default_factory=list, description="Items of this page")
    total_elements: int = Field(default=0, alias="totalElements", ge=0)
    total_pages: int = Field(default=0, alias="totalPages", ge=0)
    page: int = Field(default=0, ge=0, description="Zero-based page index")
    size: int = Field(default=10, ge=1, description="Requested page size")
    first: bool = True
    last: bool = True

    @classmethod
    def build(cls, content: Sequence[T], total: int, page: int, size: int) -> Self:
        """Create a page from its items and the total number of matches."""
        total_pages = ceil(total / size) if size else 0
        return cls(
            content=list(content),
            total_elements=total,
            total_pages=total_pages,
            page=page,
            size=size,
            first=page == 0,
            last=page + 1 >= total_pages,
        )


def validate_payload[SchemaT: BaseModel](
    schema_cls: type[SchemaT],
    data: SchemaT | Mapping[str, Any],
) -> SchemaT:
    """
    Validate a mapping against a schema, collecting every violation.

    Args:
        schema_cls: Schema to validate against.
        data: Schema instance (returned as is) or raw mapping.

    Returns:
        SchemaT: The validated schema instance.

    Raises:
        ValidationError: With one entry per violated constraint.
    """
    if isinstance(data, schema_cls):
        return data
    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e
