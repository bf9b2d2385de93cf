# blogpost/routes/comment.py

"""
Comment Routes.

Endpoints include:
  - List comments of a post (newest first) and count them
  - Get, update and delete a comment
  - Add a comment to a post
"""

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from blogpost.dependencies import CommentServiceDep
from blogpost.errors import CommentNotFoundError
from blogpost.routes.post import VALIDATION_FAILED, PageDep
from blogpost.schemas import CommentCreate, CommentResponse, CommentUpdate, PageResponse

router = APIRouter(prefix="/api/v1/comments", tags=["💬 Comments"])

COMMENT_NOT_FOUND = {
    "description": "Not found",
    "content": {
        "application/json": {
            "example": {"detail": "Comment not found with id: 7", "comment_id": 7},
        },
    },
}
POST_NOT_FOUND = {
    "description": "Post not found",
    "content": {
        "application/json": {
            "example": {"detail": "Blog post not found with id: 42", "post_id": 42},
        },
    },
}


@router.get(
    "/post/{post_id}",
    response_class=ORJSONResponse,
    response_model=PageResponse[CommentResponse],
    summary="List comments of a post",
    description="Comments of a post, newest first.",
    operation_id="comments_by_post",
)
async def get_comments_by_post_id(
    post_id: int,
    service: CommentServiceDep,
    pagination: PageDep,
) -> PageResponse[CommentResponse]:
    return await service.get_comments_by_post_id(post_id, pagination.page, pagination.size)


@router.get(
    "/post/{post_id}/count",
    response_class=ORJSONResponse,
    response_model=int,
    summary="Count comments of a post",
    description="Number of comments on a post. Unknown posts report 0.",
    responses={200: {"content": {"application/json": {"example": 3}}}},
    operation_id="comments_count",
)
async def get_comment_count(post_id: int, service: CommentServiceDep) -> int:
    return await service.get_comment_count_by_post_id(post_id)


@router.post(
    "/post/{post_id}",
    response_class=ORJSONResponse,
    response_model=CommentResponse,
    status_code=HTTP_201_CREATED,
    summary="Add a comment",
    responses={404: POST_NOT_FOUND, 422: VALIDATION_FAILED},
    operation_id="comments_create",
)
async def create_comment(
    post_id: int,
    comment: CommentCreate,
    service: CommentServiceDep,
) -> CommentResponse:
    """
    Add a comment to a post.

    Parameters
    ----------
    post_id : int
        Post to comment on.
    comment : CommentCreate
        Comment payload.
    service : CommentService
        Comment service dependency.

    Returns
    -------
    CommentResponse
        The stored comment.
    """
    return await service.create_comment(post_id, comment)


@router.get(
    "/{comment_id}",
    response_class=ORJSONResponse,
    response_model=CommentResponse,
    summary="Get comment by ID",
    responses={404: COMMENT_NOT_FOUND},
    operation_id="comments_get_by_id",
)
async def get_comment_by_id(comment_id: int, service: CommentServiceDep) -> CommentResponse:
    comment = await service.get_comment_by_id(comment_id)
    if comment is None:
        raise CommentNotFoundError(comment_id)
    return comment


@router.put(
    "/{comment_id}",
    response_class=ORJSONResponse,
    response_model=CommentResponse,
    summary="Update comment",
    description="Update the text or author details. The comment stays on its post.",
    responses={404: COMMENT_NOT_FOUND, 422: VALIDATION_FAILED},
    operation_id="comments_update",
)
async def update_comment(
    comment_id: int,
    comment: CommentUpdate,
    service: CommentServiceDep,
) -> CommentResponse:
    return await service.update_comment(comment_id, comment)


@router.delete(
    "/{comment_id}",
    response_class=ORJSONResponse,
    status_code=HTTP_204_NO_CONTENT,
    summary="Delete comment",
    responses={204: {"description": "No Content"}, 404: COMMENT_NOT_FOUND},
    operation_id="comments_delete",
)
async def delete_comment(comment_id: int, service: CommentServiceDep) -> None:
    await service.delete_comment(comment_id)
