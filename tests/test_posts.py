"""Tests for the family feed: create, list, delete."""
import pytest
from httpx import AsyncClient

from family_sns.db.models import Comment, Like, Post
from family_sns.services import post_service


@pytest.mark.asyncio
async def test_create_post_returns_author_and_zero_counts(authed_client: AsyncClient, alice):
    res = await authed_client.post("/posts", json={"content": "Hello family"})
    assert res.status_code == 201
    post = res.json()["post"]
    assert post["content"] == "Hello family"
    assert post["user_id"] == alice.id
    assert post["family_id"] == alice.family_id
    assert post["user_name"] == "Alice"
    assert post["likes_count"] == 0
    assert post["comments_count"] == 0


@pytest.mark.asyncio
async def test_create_image_only_post(authed_client: AsyncClient):
    res = await authed_client.post("/posts", json={"imageUrl": "/uploads/a.png"})
    assert res.status_code == 201
    assert res.json()["post"]["image_url"] == "/uploads/a.png"


@pytest.mark.asyncio
async def test_create_empty_post_is_rejected(authed_client: AsyncClient, db):
    res = await authed_client.post("/posts", json={"content": "   ", "imageUrl": ""})
    assert res.status_code == 400
    assert res.json()["code"] == "empty_post"
    assert db.query(Post).count() == 0


@pytest.mark.asyncio
async def test_create_post_for_someone_else_is_forbidden(authed_client: AsyncClient, bob):
    res = await authed_client.post("/posts", json={"content": "hi", "userId": bob.id})
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_list_posts_newest_first_with_pagination(authed_client: AsyncClient, db, alice):
    for i in range(3):
        post_service.create_post(db, alice.id, content=f"post {i}")

    res = await authed_client.get(
        "/posts", params={"familyId": alice.family_id, "page": 1, "limit": 2}
    )
    assert res.status_code == 200
    body = res.json()
    assert [p["content"] for p in body["posts"]] == ["post 2", "post 1"]
    assert body["page"] == 1
    assert body["limit"] == 2

    res = await authed_client.get(
        "/posts", params={"familyId": alice.family_id, "page": 2, "limit": 2}
    )
    assert [p["content"] for p in res.json()["posts"]] == ["post 0"]


@pytest.mark.asyncio
async def test_list_posts_counts_match_rows(authed_client: AsyncClient, db, alice, bob):
    post = post_service.create_post(db, alice.id, content="counted")
    post_service.toggle_like(db, post.id, alice.id, alice.family_id)
    post_service.toggle_like(db, post.id, bob.id, bob.family_id)
    post_service.add_comment(db, post.id, bob.id, bob.family_id, "nice")

    res = await authed_client.get("/posts", params={"familyId": alice.family_id})
    listed = res.json()["posts"][0]
    assert listed["likes_count"] == 2
    assert listed["comments_count"] == 1


@pytest.mark.asyncio
async def test_list_posts_requires_family_id(authed_client: AsyncClient):
    res = await authed_client.get("/posts")
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_list_posts_of_other_family_is_forbidden(authed_client: AsyncClient, outsider):
    res = await authed_client.get("/posts", params={"familyId": outsider.family_id})
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_limit_above_max_is_400(authed_client: AsyncClient, alice):
    res = await authed_client.get("/posts", params={"familyId": alice.family_id, "limit": 500})
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_non_author_delete_leaves_everything(
    client: AsyncClient, db, alice, bob, headers_for
):
    post = post_service.create_post(db, alice.id, content="mine")
    post_service.toggle_like(db, post.id, bob.id, bob.family_id)
    post_service.add_comment(db, post.id, bob.id, bob.family_id, "hi")

    res = await client.delete(f"/posts/{post.id}", headers=headers_for(bob))
    assert res.status_code == 403
    assert res.json()["code"] == "not_authorized"

    assert db.get(Post, post.id) is not None
    assert db.query(Like).filter(Like.post_id == post.id).count() == 1
    assert db.query(Comment).filter(Comment.post_id == post.id).count() == 1


@pytest.mark.asyncio
async def test_author_delete_cascades(authed_client: AsyncClient, db, alice, bob):
    post = post_service.create_post(db, alice.id, content="bye")
    post_service.toggle_like(db, post.id, bob.id, bob.family_id)
    post_service.add_comment(db, post.id, bob.id, bob.family_id, "hi")

    res = await authed_client.delete(f"/posts/{post.id}")
    assert res.status_code == 200

    db.expire_all()
    assert db.get(Post, post.id) is None
    assert db.query(Like).count() == 0
    assert db.query(Comment).count() == 0


@pytest.mark.asyncio
async def test_post_of_other_family_is_not_found(
    client: AsyncClient, db, alice, outsider, headers_for
):
    post = post_service.create_post(db, alice.id, content="private")

    res = await client.delete(f"/posts/{post.id}", headers=headers_for(outsider))
    assert res.status_code == 404

    res = await client.get(f"/posts/{post.id}/comments", headers=headers_for(outsider))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_post_is_404(authed_client: AsyncClient):
    res = await authed_client.delete("/posts/nope")
    assert res.status_code == 404
    assert res.json()["code"] == "post_not_found"
