"""Tests for post use cases."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from blogpost.errors import PostNotFoundError, ValidationError
from blogpost.managers import CacheManager
from blogpost.models import PostStatus
from blogpost.schemas import PostResponse
from blogpost.services import CommentService, PostService

type PostFactory = Callable[..., Awaitable[PostResponse]]


@pytest.fixture
def invalidations(cache: CacheManager, monkeypatch: pytest.MonkeyPatch) -> list[set[str]]:
    """Record the namespaces each write invalidates."""
    calls: list[set[str]] = []
    real_invalidate = cache.invalidate

    async def spy(*namespaces: str) -> None:
        calls.append(set(namespaces))
        await real_invalidate(*namespaces)

    monkeypatch.setattr(cache, "invalidate", spy)
    return calls


@pytest.mark.asyncio
async def test_create_post(post_service: PostService, post_payload: dict[str, Any]) -> None:
    post = await post_service.create_post(post_payload)

    assert post.id is not None
    assert post.slug == "welcome-to-our-blog"
    assert post.status == PostStatus.DRAFT
    assert post.view_count == 0
    assert post.comment_count == 0
    assert post.published_at is None
    assert post.tags == ["intro", "news"]


@pytest.mark.asyncio
async def test_create_rejects_short_title(post_service: PostService, post_payload: dict[str, Any]) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await post_service.create_post(post_payload | {"title": "Hi"})

    assert "Title must be between 5 and 100 characters" in exc_info.value.messages
    assert (await post_service.get_all_posts()).total_elements == 0


@pytest.mark.asyncio
async def test_create_published_post_sets_published_at(make_post: PostFactory) -> None:
    post = await make_post(status="PUBLISHED")
    assert post.status == PostStatus.PUBLISHED
    assert post.published_at is not None


@pytest.mark.asyncio
async def test_round_trip(post_service: PostService, post_payload: dict[str, Any]) -> None:
    created = await post_service.create_post(post_payload)
    fetched = await post_service.get_post_by_id(created.id)

    assert fetched is not None
    assert fetched.title == post_payload["title"]
    assert fetched.content == post_payload["content"]
    assert fetched.author == post_payload["author"]
    assert fetched.summary == post_payload["summary"]
    assert set(fetched.tags) == set(post_payload["tags"])


@pytest.mark.asyncio
async def test_slug_collisions_get_numeric_suffix(make_post: PostFactory) -> None:
    slugs = [(await make_post()).slug for _ in range(3)]
    assert slugs == ["welcome-to-our-blog", "welcome-to-our-blog-2", "welcome-to-our-blog-3"]


@pytest.mark.asyncio
async def test_title_without_slug_characters_gets_fallback_slug(make_post: PostFactory) -> None:
    post = await make_post(title="!!! ???")
    assert post.slug == "post"


@pytest.mark.asyncio
async def test_get_post_by_id_missing(post_service: PostService) -> None:
    assert await post_service.get_post_by_id(404) is None


@pytest.mark.asyncio
async def test_get_post_by_id_does_not_count_views(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    await post_service.get_post_by_id(post.id)
    fetched = await post_service.get_post_by_id(post.id)
    assert fetched.view_count == 0


@pytest.mark.asyncio
async def test_update_applies_supplied_fields_only(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    await post_service.increment_view_count(post.id)
    before = await post_service.get_post_by_id(post.id)

    updated = await post_service.update_post(post.id, {"summary": "A new summary"})

    assert updated.summary == "A new summary"
    assert updated.title == before.title
    assert updated.slug == before.slug
    assert updated.tags == before.tags
    assert updated.view_count == 1
    assert updated.created_at == before.created_at


@pytest.mark.asyncio
async def test_update_title_regenerates_slug(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    updated = await post_service.update_post(post.id, {"title": "A Brand New Title"})

    assert updated.slug == "a-brand-new-title"
    assert await post_service.get_post_by_slug("welcome-to-our-blog") is None
    assert (await post_service.get_post_by_slug("a-brand-new-title")).id == post.id


@pytest.mark.asyncio
async def test_update_keeps_slug_when_title_maps_to_own_slug(
    post_service: PostService,
    make_post: PostFactory,
) -> None:
    post = await make_post()
    updated = await post_service.update_post(post.id, {"title": "Welcome to our blog!"})
    assert updated.slug == "welcome-to-our-blog"


@pytest.mark.asyncio
async def test_update_replaces_tags_and_status(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    updated = await post_service.update_post(post.id, {"tags": ["python"], "status": "published"})

    assert updated.tags == ["python"]
    assert updated.status == PostStatus.PUBLISHED
    assert updated.published_at is not None


@pytest.mark.asyncio
async def test_update_missing_post(post_service: PostService) -> None:
    with pytest.raises(PostNotFoundError):
        await post_service.update_post(404, {"summary": "Nope"})


@pytest.mark.asyncio
async def test_update_validates_before_lookup(post_service: PostService) -> None:
    with pytest.raises(ValidationError):
        await post_service.update_post(404, {"title": "Hi"})


@pytest.mark.asyncio
async def test_publish_sets_published_at_once(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()

    await post_service.publish_post(post.id)
    first = await post_service.get_post_by_id(post.id)
    await post_service.publish_post(post.id)
    second = await post_service.get_post_by_id(post.id)

    assert first.status == PostStatus.PUBLISHED
    assert first.published_at is not None
    assert second.published_at == first.published_at


@pytest.mark.asyncio
async def test_publish_missing_post_changes_nothing(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()

    with pytest.raises(PostNotFoundError):
        await post_service.publish_post(post.id + 100)

    page = await post_service.get_all_posts()
    assert page.total_elements == 1
    assert page.content[0].status == PostStatus.DRAFT


@pytest.mark.asyncio
async def test_archive_twice(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post(publish=True)

    first = await post_service.archive_post(post.id)
    second = await post_service.archive_post(post.id)

    assert first.status == second.status == PostStatus.ARCHIVED
    assert second.published_at is not None


@pytest.mark.asyncio
async def test_increment_view_count_n_times(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    for expected in range(1, 6):
        assert (await post_service.increment_view_count(post.id)).view_count == expected
    assert (await post_service.get_post_by_id(post.id)).view_count == 5


@pytest.mark.asyncio
async def test_increment_view_count_touches_post(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()
    before = await post_service.get_post_by_id(post.id)

    counted = await post_service.increment_view_count(post.id)

    assert counted.updated_at > before.updated_at
    assert counted.created_at == before.created_at
    assert (await post_service.get_post_by_id(post.id)).updated_at == counted.updated_at


@pytest.mark.asyncio
async def test_concurrent_increments_are_not_lost(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post()

    await asyncio.gather(*(post_service.increment_view_count(post.id) for _ in range(20)))

    assert (await post_service.get_post_by_id(post.id)).view_count == 20


@pytest.mark.asyncio
async def test_increment_view_count_missing_post(post_service: PostService) -> None:
    with pytest.raises(PostNotFoundError):
        await post_service.increment_view_count(404)


@pytest.mark.asyncio
async def test_delete_post_cascades_comments(
    post_service: PostService,
    comment_service: CommentService,
    make_post: PostFactory,
) -> None:
    post = await make_post()
    comment = await comment_service.create_comment(post.id, {"content": "First!", "authorName": "Bob"})
    assert (await post_service.get_post_by_id(post.id)).comment_count == 1

    await post_service.delete_post(post.id)

    assert await comment_service.get_comment_count_by_post_id(post.id) == 0
    assert await comment_service.get_comment_by_id(comment.id) is None
    assert await post_service.get_post_by_id(post.id) is None


@pytest.mark.asyncio
async def test_delete_missing_post(post_service: PostService) -> None:
    with pytest.raises(PostNotFoundError):
        await post_service.delete_post(404)


@pytest.mark.asyncio
async def test_tag_filter_only_returns_published(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(title="Java for beginners", tags=["java"], publish=True)
    await make_post(title="Java and Spring", tags=["java", "spring"], publish=True)
    await make_post(title="Java draft notes", tags=["java"])
    await make_post(title="Python tricks", tags=["python"], publish=True)

    page = await post_service.get_posts_by_tags(["java"], page=0, size=10)

    assert page.total_elements == 2
    for post in page.content:
        assert "java" in post.tags
        assert post.status == PostStatus.PUBLISHED


@pytest.mark.asyncio
async def test_search_and_author_filters(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(title="Async Python", author="Grace Hopper", publish=True)
    await make_post(title="Async drafts", author="Grace Hopper")
    await make_post(title="Unrelated post", author="Alan Turing", publish=True)

    found = await post_service.search_posts("ASYNC")
    assert [p.title for p in found.content] == ["Async Python"]

    by_author = await post_service.get_posts_by_author("grace")
    assert by_author.total_elements == 2


@pytest.mark.asyncio
async def test_get_posts_by_status(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(publish=True)
    await make_post()

    assert (await post_service.get_posts_by_status("draft")).total_elements == 1
    assert (await post_service.get_posts_by_status(PostStatus.PUBLISHED)).total_elements == 1
    with pytest.raises(ValidationError):
        await post_service.get_posts_by_status("deleted")


@pytest.mark.asyncio
async def test_get_all_posts_sorting(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(title="Bravo post")
    await make_post(title="Alpha post")
    await make_post(title="Charlie post")

    ascending = await post_service.get_all_posts(sort_by="title", sort_dir="ASC")
    assert [p.title for p in ascending.content] == ["Alpha post", "Bravo post", "Charlie post"]

    descending = await post_service.get_all_posts(sort_by="title", sort_dir="DeSc")
    assert [p.title for p in descending.content] == ["Charlie post", "Bravo post", "Alpha post"]

    paged = await post_service.get_all_posts(page=1, size=2)
    assert paged.total_pages == 2
    assert paged.last is True
    assert [p.title for p in paged.content] == ["Bravo post"]

    with pytest.raises(ValidationError):
        await post_service.get_all_posts(sort_by="nope")


@pytest.mark.asyncio
async def test_counts_and_author_stats(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(author="Ann Lee", publish=True)
    await make_post(author="Ann Lee")
    await make_post(author="Bob Ray", publish=True)

    assert await post_service.get_post_count("PUBLISHED") == 2
    assert await post_service.get_post_count(PostStatus.ARCHIVED) == 0

    stats = await post_service.get_author_stats()
    assert [(s.author, s.post_count) for s in stats] == [("Ann Lee", 2), ("Bob Ray", 1)]


# --- Caching ---


@pytest.mark.asyncio
async def test_published_posts_are_cached(post_service: PostService, make_post: PostFactory) -> None:
    post = await make_post(publish=True)

    first = await post_service.get_published_posts()
    # View counts do not invalidate cached pages
    await post_service.increment_view_count(post.id)
    cached = await post_service.get_published_posts()

    assert first.total_elements == 1
    assert cached.content[0].view_count == 0


@pytest.mark.asyncio
async def test_published_posts_refresh_after_write(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(publish=True)
    assert (await post_service.get_published_posts()).total_elements == 1

    second = await make_post(publish=True)
    page = await post_service.get_published_posts()
    assert page.total_elements == 2

    await post_service.archive_post(second.id)
    assert (await post_service.get_published_posts()).total_elements == 1


@pytest.mark.asyncio
async def test_slug_lookup_misses_are_not_cached(post_service: PostService, make_post: PostFactory) -> None:
    assert await post_service.get_post_by_slug("welcome-to-our-blog") is None

    # Creating a post does not clear the slug namespace
    post = await make_post()
    found = await post_service.get_post_by_slug("welcome-to-our-blog")
    assert found is not None
    assert found.id == post.id


@pytest.mark.asyncio
async def test_all_tags_only_from_published_posts(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(tags=["web", "api"], publish=True)
    await make_post(title="Hidden draft", tags=["secret"])

    assert await post_service.get_all_tags() == ["api", "web"]


@pytest.mark.asyncio
async def test_publish_leaves_tag_listing_cached(post_service: PostService, make_post: PostFactory) -> None:
    await make_post(tags=["web"], publish=True)
    draft = await make_post(title="Later post", tags=["later"])
    assert await post_service.get_all_tags() == ["web"]

    await post_service.publish_post(draft.id)
    assert await post_service.get_all_tags() == ["web"]

    await post_service.update_post(draft.id, {"summary": "Changed"})
    assert await post_service.get_all_tags() == ["later", "web"]


@pytest.mark.asyncio
async def test_invalidation_scope(
    post_service: PostService,
    comment_service: CommentService,
    invalidations: list[set[str]],
    post_payload: dict[str, Any],
) -> None:
    post = await post_service.create_post(post_payload)
    assert invalidations[-1] == {"published_posts", "all_tags"}

    await post_service.update_post(post.id, {"summary": "Changed"})
    assert invalidations[-1] == {"published_posts", "post_by_slug", "all_tags"}

    await post_service.publish_post(post.id)
    assert invalidations[-1] == {"published_posts", "post_by_slug"}

    await post_service.archive_post(post.id)
    assert invalidations[-1] == {"published_posts", "post_by_slug"}

    count = len(invalidations)
    await post_service.increment_view_count(post.id)
    comment = await comment_service.create_comment(post.id, {"content": "Hi", "authorName": "Bob"})
    await comment_service.update_comment(comment.id, {"content": "Edited", "authorName": "Bob"})
    await comment_service.delete_comment(comment.id)
    assert len(invalidations) == count

    await post_service.delete_post(post.id)
    assert invalidations[-1] == {"published_posts", "post_by_slug", "all_tags"}


@pytest.mark.asyncio
async def test_failed_write_does_not_invalidate(
    post_service: PostService,
    invalidations: list[set[str]],
) -> None:
    with pytest.raises(PostNotFoundError):
        await post_service.publish_post(404)
    assert invalidations == []
