# blogpost/routes/post.py

"""
Post Routes.

Summary
-------
Endpoints include:
  - List posts (all, published, by author, by tags, by status)
  - Search published posts
  - Get post by id (counts a view) or by slug
  - Tag listing and post statistics
  - Create, update, publish, archive and delete a post

Static paths (``/published``, ``/search``, ``/tags``...) are declared before
``/{post_id}`` so they are never captured as ids.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from blogpost.configs import settings
from blogpost.dependencies import PostServiceDep
from blogpost.errors import NotFoundError
from blogpost.schemas import AuthorStat, PageResponse, PostCreate, PostResponse, PostUpdate

router = APIRouter(prefix="/api/v1/posts", tags=["📝 Posts"])

type PostPage = PageResponse[PostResponse]

NOT_FOUND = {
    "description": "Not found",
    "content": {
        "application/json": {"example": {"detail": "Blog post not found with id: 42", "post_id": 42}},
    },
}
VALIDATION_FAILED = {
    "description": "Validation failed",
    "content": {
        "application/json": {
            "example": {
                "detail": "Validation failed",
                "errors": [
                    {
                        "field": "title",
                        "message": "Title must be between 5 and 100 characters",
                        "type": "value_error",
                    },
                ],
            },
        },
    },
}
SLUG_CONFLICT = {
    "description": "Slug conflict",
    "content": {
        "application/json": {
            "example": {"detail": "Blog post with slug 'hello-world' already exists"},
        },
    },
}


@dataclass(frozen=True)
class PageQuery:
    """
    Query container for pagination.

    Parameters
    ----------
    page : int
        Zero-based page index.
    size : int
        Number of items per page.
    """

    page: int = 0
    size: int = settings.DEFAULT_PAGE_SIZE


def get_page_query(
    page: Annotated[int, Query(ge=0, description="Page number (0-based)")] = 0,
    size: Annotated[
        int,
        Query(ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"),
    ] = settings.DEFAULT_PAGE_SIZE,
) -> PageQuery:
    """
    Dependency to construct `PageQuery` from query parameters.

    Returns
    -------
    PageQuery
        Aggregated pagination parameters.
    """
    return PageQuery(page=page, size=size)


PageDep = Annotated[PageQuery, Depends(get_page_query)]


def split_tags(tags: list[str]) -> list[str]:
    """Accept ``?tags=a,b`` as well as ``?tags=a&tags=b``."""
    return [tag.strip() for value in tags for tag in value.split(",") if tag.strip()]


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="List all posts",
    description="Page through every post, sorted by any sortable field.",
    responses={422: VALIDATION_FAILED},
    operation_id="posts_list",
)
async def get_all_posts(
    service: PostServiceDep,
    pagination: PageDep,
    sort_by: Annotated[str, Query(alias="sortBy", description="Sort field")] = "createdAt",
    sort_dir: Annotated[str, Query(alias="sortDir", description="asc or desc")] = "desc",
) -> PostPage:
    """
    Get every post.

    Parameters
    ----------
    service : PostService
        Post service dependency.
    pagination : PageQuery
        Page and size.
    sort_by : str
        One of id, title, author, status, viewCount, createdAt, updatedAt, publishedAt.
    sort_dir : str
        ``desc`` for descending order, anything else sorts ascending.

    Returns
    -------
    PageResponse[PostResponse]
        One page of posts.
    """
    return await service.get_all_posts(pagination.page, pagination.size, sort_by, sort_dir)


@router.get(
    "/published",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="List published posts",
    description="Published posts, newest first. Served from the cache when possible.",
    operation_id="posts_published",
)
async def get_published_posts(service: PostServiceDep, pagination: PageDep) -> PostPage:
    return await service.get_published_posts(pagination.page, pagination.size)


@router.get(
    "/slug/{slug}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Get post by slug",
    responses={404: NOT_FOUND},
    operation_id="posts_get_by_slug",
)
async def get_post_by_slug(slug: str, service: PostServiceDep) -> PostResponse:
    """Get a post by its slug. Does not count a view."""
    post = await service.get_post_by_slug(slug)
    if post is None:
        raise NotFoundError(f"Blog post not found with slug: {slug}")
    return post


@router.get(
    "/author/{author}",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="List posts by author",
    description="Posts whose author name contains the given text, ignoring case.",
    operation_id="posts_by_author",
)
async def get_posts_by_author(author: str, service: PostServiceDep, pagination: PageDep) -> PostPage:
    return await service.get_posts_by_author(author, pagination.page, pagination.size)


@router.get(
    "/search",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="Search published posts",
    description="Published posts whose title or content contains the keyword, ignoring case.",
    operation_id="posts_search",
)
async def search_posts(
    keyword: Annotated[str, Query(min_length=1, description="Text to look for")],
    service: PostServiceDep,
    pagination: PageDep,
) -> PostPage:
    return await service.search_posts(keyword, pagination.page, pagination.size)


@router.get(
    "/tags",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="List published posts by tags",
    description="Published posts carrying at least one of the tags.",
    operation_id="posts_by_tags",
)
async def get_posts_by_tags(
    tags: Annotated[list[str], Query(description="Comma-separated or repeated tags")],
    service: PostServiceDep,
    pagination: PageDep,
) -> PostPage:
    return await service.get_posts_by_tags(split_tags(tags), pagination.page, pagination.size)


@router.get(
    "/tags/all",
    response_class=ORJSONResponse,
    response_model=list[str],
    summary="List all tags",
    description="Sorted tags used by published posts.",
    responses={200: {"content": {"application/json": {"example": ["fastapi", "python"]}}}},
    operation_id="posts_all_tags",
)
async def get_all_tags(service: PostServiceDep) -> list[str]:
    return await service.get_all_tags()


@router.get(
    "/status/{status}",
    response_class=ORJSONResponse,
    response_model=PageResponse[PostResponse],
    summary="List posts by status",
    responses={422: VALIDATION_FAILED},
    operation_id="posts_by_status",
)
async def get_posts_by_status(status: str, service: PostServiceDep, pagination: PageDep) -> PostPage:
    return await service.get_posts_by_status(status, pagination.page, pagination.size)


@router.get(
    "/stats/count",
    response_class=ORJSONResponse,
    response_model=int,
    summary="Count posts by status",
    responses={200: {"content": {"application/json": {"example": 12}}}},
    operation_id="posts_count",
)
async def get_post_count(
    status: Annotated[str, Query(description="DRAFT, PUBLISHED or ARCHIVED")],
    service: PostServiceDep,
) -> int:
    return await service.get_post_count(status)


@router.get(
    "/stats/authors",
    response_class=ORJSONResponse,
    response_model=list[AuthorStat],
    summary="Post count per author",
    description="Authors ordered by number of posts, optionally restricted to one status.",
    responses={
        200: {
            "content": {
                "application/json": {"example": [{"author": "Jane Doe", "postCount": 3}]},
            },
        },
    },
    operation_id="posts_author_stats",
)
async def get_author_stats(
    service: PostServiceDep,
    status: Annotated[str | None, Query(description="Optional status filter")] = None,
) -> list[AuthorStat]:
    return await service.get_author_stats(status)


@router.post(
    "",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    status_code=HTTP_201_CREATED,
    summary="Create a new post",
    description="Create a post. It starts as DRAFT unless another status is given.",
    responses={409: SLUG_CONFLICT, 422: VALIDATION_FAILED},
    operation_id="posts_create",
)
async def create_post(
    post: Annotated[
        PostCreate,
        Body(
            examples={
                "basic": {
                    "summary": "Basic post creation",
                    "value": {
                        "title": "Welcome to Our Blog",
                        "content": "This is the very first post on the blog.",
                        "author": "Jane Doe",
                        "tags": ["news"],
                    },
                },
            },
        ),
    ],
    service: PostServiceDep,
) -> PostResponse:
    """
    Create a new post.

    Parameters
    ----------
    post : PostCreate
        Post input payload.
    service : PostService
        Post service dependency.

    Returns
    -------
    PostResponse
        Created post with its derived slug.
    """
    return await service.create_post(post)


@router.get(
    "/{post_id}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Get post by ID",
    description="Retrieve a post by its id. Increments the view count.",
    responses={404: NOT_FOUND},
    operation_id="posts_get_by_id",
)
async def get_post_by_id(post_id: int, service: PostServiceDep) -> PostResponse:
    """
    Get a post and count the view.

    Parameters
    ----------
    post_id : int
        Post identifier.
    service : PostService
        Post service dependency.

    Returns
    -------
    PostResponse
        The post, its view count already including this request.
    """
    return await service.increment_view_count(post_id)


@router.put(
    "/{post_id}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Update post",
    description="Update the supplied fields of a post. A new title changes the slug.",
    responses={404: NOT_FOUND, 409: SLUG_CONFLICT, 422: VALIDATION_FAILED},
    operation_id="posts_update",
)
async def update_post(post_id: int, post: PostUpdate, service: PostServiceDep) -> PostResponse:
    return await service.update_post(post_id, post)


@router.patch(
    "/{post_id}/publish",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Publish post",
    responses={404: NOT_FOUND},
    operation_id="posts_publish",
)
async def publish_post(post_id: int, service: PostServiceDep) -> PostResponse:
    return await service.publish_post(post_id)


@router.patch(
    "/{post_id}/archive",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Archive post",
    responses={404: NOT_FOUND},
    operation_id="posts_archive",
)
async def archive_post(post_id: int, service: PostServiceDep) -> PostResponse:
    return await service.archive_post(post_id)


@router.delete(
    "/{post_id}",
    response_class=ORJSONResponse,
    status_code=HTTP_204_NO_CONTENT,
    summary="Delete post",
    description="Delete a post together with its comments.",
    responses={204: {"description": "No Content"}, 404: NOT_FOUND},
    operation_id="posts_delete",
)
async def delete_post(post_id: int, service: PostServiceDep) -> None:
    await service.delete_post(post_id)
