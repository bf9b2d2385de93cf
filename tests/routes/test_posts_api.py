"""Tests for the post endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient

BASE = "/api/v1/posts"


async def _create(client: AsyncClient, payload: dict[str, Any], *, publish: bool = False) -> dict[str, Any]:
    response = await client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    post = response.json()
    if publish:
        response = await client.patch(f"{BASE}/{post['id']}/publish")
        assert response.status_code == 200
        post = response.json()
    return post


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "backend" in body["cache"]


@pytest.mark.asyncio
async def test_create_post_returns_camel_case(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    post = await _create(client, post_payload)

    assert post["slug"] == "welcome-to-our-blog"
    assert post["status"] == "DRAFT"
    assert post["viewCount"] == 0
    assert post["commentCount"] == 0
    assert post["publishedAt"] is None
    assert "createdAt" in post
    assert "updatedAt" in post


@pytest.mark.asyncio
async def test_create_post_validation_error(client: AsyncClient) -> None:
    response = await client.post(BASE, json={"title": "Hi", "content": "short"})

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Validation failed"
    messages = " | ".join(error["message"] for error in body["errors"])
    assert "Title must be between 5 and 100 characters" in messages
    assert "Content must be at least 10 characters" in messages
    assert "Author is required" in messages

    listing = await client.get(BASE)
    assert listing.json()["totalElements"] == 0


@pytest.mark.asyncio
async def test_get_post_by_id_counts_views(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    post = await _create(client, post_payload)

    first = await client.get(f"{BASE}/{post['id']}")
    second = await client.get(f"{BASE}/{post['id']}")

    assert first.json()["viewCount"] == 1
    assert second.json()["viewCount"] == 2


@pytest.mark.asyncio
async def test_get_missing_post(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Blog post not found with id: 999"


@pytest.mark.asyncio
async def test_get_post_by_slug(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    post = await _create(client, post_payload)

    response = await client.get(f"{BASE}/slug/welcome-to-our-blog")
    assert response.status_code == 200
    assert response.json()["id"] == post["id"]
    assert response.json()["viewCount"] == 0

    missing = await client.get(f"{BASE}/slug/no-such-post")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Blog post not found with slug: no-such-post"


@pytest.mark.asyncio
async def test_list_all_posts_pagination(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    for _ in range(3):
        await _create(client, post_payload)

    response = await client.get(BASE, params={"page": 0, "size": 2, "sortBy": "id", "sortDir": "asc"})
    body = response.json()

    assert body["totalElements"] == 3
    assert body["totalPages"] == 2
    assert body["first"] is True
    assert body["last"] is False
    assert [p["slug"] for p in body["content"]] == ["welcome-to-our-blog", "welcome-to-our-blog-2"]


@pytest.mark.asyncio
async def test_list_rejects_bad_paging_and_sort(client: AsyncClient) -> None:
    assert (await client.get(BASE, params={"size": 101})).status_code == 422
    assert (await client.get(BASE, params={"page": -1})).status_code == 422

    response = await client.get(BASE, params={"sortBy": "password"})
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "sortBy"


@pytest.mark.asyncio
async def test_published_and_status_listing(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    await _create(client, post_payload, publish=True)
    await _create(client, post_payload | {"title": "Draft only post"})

    published = (await client.get(f"{BASE}/published")).json()
    assert published["totalElements"] == 1
    assert published["content"][0]["status"] == "PUBLISHED"

    drafts = (await client.get(f"{BASE}/status/draft")).json()
    assert [p["title"] for p in drafts["content"]] == ["Draft only post"]

    assert (await client.get(f"{BASE}/status/deleted")).status_code == 422


@pytest.mark.asyncio
async def test_filter_by_tags(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    await _create(client, post_payload | {"title": "Java tips", "tags": ["java"]}, publish=True)
    await _create(client, post_payload | {"title": "Kotlin tips", "tags": ["kotlin"]}, publish=True)
    await _create(client, post_payload | {"title": "Rust tips", "tags": ["rust"]}, publish=True)

    comma = (await client.get(f"{BASE}/tags", params={"tags": "java,kotlin"})).json()
    repeated = (await client.get(f"{BASE}/tags", params=[("tags", "java"), ("tags", "kotlin")])).json()

    assert comma["totalElements"] == repeated["totalElements"] == 2

    tags = (await client.get(f"{BASE}/tags/all")).json()
    assert tags == ["java", "kotlin", "rust"]


@pytest.mark.asyncio
async def test_search_and_author(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    await _create(client, post_payload | {"title": "FastAPI in depth"}, publish=True)
    await _create(client, post_payload | {"title": "FastAPI drafts"})

    found = (await client.get(f"{BASE}/search", params={"keyword": "fastapi"})).json()
    assert [p["title"] for p in found["content"]] == ["FastAPI in depth"]

    by_author = (await client.get(f"{BASE}/author/jane")).json()
    assert by_author["totalElements"] == 2


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    await _create(client, post_payload, publish=True)
    await _create(client, post_payload | {"author": "John Roe"})

    count = await client.get(f"{BASE}/stats/count", params={"status": "PUBLISHED"})
    assert count.json() == 1

    authors = (await client.get(f"{BASE}/stats/authors")).json()
    assert {"author": "Jane Doe", "postCount": 1} in authors
    assert len(authors) == 2


@pytest.mark.asyncio
async def test_update_publish_archive_delete(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    post = await _create(client, post_payload)
    url = f"{BASE}/{post['id']}"

    updated = await client.put(url, json={"title": "Renamed blog post"})
    assert updated.status_code == 200
    assert updated.json()["slug"] == "renamed-blog-post"
    assert updated.json()["content"] == post_payload["content"]

    published = (await client.patch(f"{url}/publish")).json()
    assert published["status"] == "PUBLISHED"
    assert published["publishedAt"] is not None

    archived = (await client.patch(f"{url}/archive")).json()
    assert archived["status"] == "ARCHIVED"
    assert archived["publishedAt"][:19] == published["publishedAt"][:19]

    deleted = await client.delete(url)
    assert deleted.status_code == 204
    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url)).status_code == 404


@pytest.mark.asyncio
async def test_update_validation_and_missing(client: AsyncClient, post_payload: dict[str, Any]) -> None:
    post = await _create(client, post_payload)

    invalid = await client.put(f"{BASE}/{post['id']}", json={"summary": "x" * 201})
    assert invalid.status_code == 422
    assert "Summary cannot exceed 200 characters" in invalid.json()["errors"][0]["message"]

    missing = await client.put(f"{BASE}/999", json={"summary": "Fine"})
    assert missing.status_code == 404
    assert (await client.patch(f"{BASE}/999/publish")).status_code == 404
