# circularbuild/tests/integration/test_news_api.py
import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

API = "/api/v1"


@pytest.fixture
def editor_headers(auth_headers):
    return auth_headers("editor-1", name="Eda Editor")


async def publish(client, headers, **overrides):
    payload = {
        "title": "Deconstruction season",
        "body": "Crews salvaged **four** tons of timber this month.",
        "coverImageUrl": "https://cdn.example.com/timber.jpg",
    }
    payload.update(overrides)
    response = await client.post(f"{API}/news/posts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_publish_and_list_posts(client: AsyncClient, editor_headers):
    first = await publish(client, editor_headers)
    second = await publish(client, editor_headers, title="  Spring drive  ", coverImageUrl="  ")

    assert first["author_id"] == "editor-1"
    assert first["cover_image_url"] == "https://cdn.example.com/timber.jpg"
    assert second["title"] == "Spring drive"
    assert second["cover_image_url"] is None

    response = await client.get(f"{API}/news/posts")
    assert response.status_code == 200
    posts = response.json()
    assert [post["id"] for post in posts] == [second["id"], first["id"]]
    assert posts[1]["excerpt"] == "Crews salvaged four tons of timber this month."
    assert posts[1]["read_minutes"] == 1
    assert posts[1]["likes"] == 0
    assert posts[1]["comments"] == 0


@pytest.mark.parametrize("overrides", [{"title": "   "}, {"body": ""}])
async def test_publish_requires_title_and_body(client: AsyncClient, editor_headers, overrides):
    payload = {"title": "Title", "body": "Body", **overrides}
    response = await client.post(f"{API}/news/posts", json=payload, headers=editor_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Title and body are required."


async def test_publish_requires_auth(client: AsyncClient):
    response = await client.post(f"{API}/news/posts", json={"title": "T", "body": "B"})
    assert response.status_code == 401


async def test_only_author_edits_post(client: AsyncClient, editor_headers, buyer_headers):
    post = await publish(client, editor_headers)

    response = await client.put(
        f"{API}/news/posts/{post['id']}",
        json={"title": "Hijacked", "body": "Nope"},
        headers=buyer_headers,
    )
    assert response.status_code == 403

    response = await client.put(
        f"{API}/news/posts/{post['id']}",
        json={"title": "Deconstruction season, updated", "body": "Five tons."},
        headers=editor_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Deconstruction season, updated"
    assert data["cover_image_url"] is None
    assert data["updated_at"] is not None

    response = await client.put(
        f"{API}/news/posts/9999", json={"title": "T", "body": "B"}, headers=editor_headers
    )
    assert response.status_code == 404


async def test_comments_listed_oldest_first(
    client: AsyncClient, editor_headers, buyer_headers, auth_headers
):
    post = await publish(client, editor_headers)

    response = await client.post(
        f"{API}/news/posts/{post['id']}/comments",
        json={"comment": "  Great haul!  "},
        headers=buyer_headers,
    )
    assert response.status_code == 201
    comment = response.json()
    assert comment["comment"] == "Great haul!"
    assert comment["user_name"] == "Bea Buyer"

    await client.post(
        f"{API}/news/posts/{post['id']}/comments",
        json={"comment": "Count me in"},
        headers=auth_headers("carol"),
    )

    response = await client.get(f"{API}/news/posts/{post['id']}")
    assert response.status_code == 200
    detail = response.json()
    assert [(c["comment"], c["user_name"]) for c in detail["comments"]] == [
        ("Great haul!", "Bea Buyer"),
        ("Count me in", "Carol"),
    ]

    response = await client.get(f"{API}/news/posts")
    assert response.json()[0]["comments"] == 2


async def test_empty_comment_rejected(client: AsyncClient, editor_headers, buyer_headers):
    post = await publish(client, editor_headers)

    response = await client.post(
        f"{API}/news/posts/{post['id']}/comments", json={"comment": "   "}, headers=buyer_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Comment cannot be empty."

    response = await client.post(
        f"{API}/news/posts/9999/comments", json={"comment": "Hello"}, headers=buyer_headers
    )
    assert response.status_code == 404


async def test_like_and_unlike(client: AsyncClient, editor_headers, buyer_headers, seller_headers):
    post = await publish(client, editor_headers)
    like_url = f"{API}/news/posts/{post['id']}/like"

    response = await client.post(like_url, headers=buyer_headers)
    assert response.json() == {"likes": 1, "liked": True}
    # liking twice keeps a single like
    response = await client.post(like_url, headers=buyer_headers)
    assert response.json() == {"likes": 1, "liked": True}
    response = await client.post(like_url, headers=seller_headers)
    assert response.json() == {"likes": 2, "liked": True}

    response = await client.get(f"{API}/news/posts/{post['id']}", headers=buyer_headers)
    assert response.json()["likes"] == 2
    assert response.json()["liked"] is True

    response = await client.delete(like_url, headers=buyer_headers)
    assert response.json() == {"likes": 1, "liked": False}
    response = await client.delete(like_url, headers=buyer_headers)
    assert response.json() == {"likes": 1, "liked": False}

    response = await client.get(f"{API}/news/posts/{post['id']}")
    assert response.json()["liked"] is False


async def test_missing_post(client: AsyncClient, buyer_headers):
    response = await client.get(f"{API}/news/posts/9999")
    assert response.status_code == 404

    response = await client.post(f"{API}/news/posts/9999/like", headers=buyer_headers)
    assert response.status_code == 404
