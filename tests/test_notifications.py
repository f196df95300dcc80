"""Tests for durable notifications."""
import pytest
from httpx import AsyncClient

from family_sns.services import message_service


@pytest.mark.asyncio
async def test_list_count_and_mark_read(client: AsyncClient, db, alice, bob, headers_for):
    message_service.send_message(db, bob.id, alice.id, "first")
    message_service.send_message(db, bob.id, alice.id, "second")

    res = await client.get("/notifications", headers=headers_for(alice))
    assert res.status_code == 200
    body = res.json()
    assert body["unread_count"] == 2
    assert [n["message"] for n in body["items"]] == ["second", "first"]
    assert body["items"][0]["title"] == "New message from Bob"

    res = await client.get("/notifications/count", headers=headers_for(alice))
    assert res.json() == {"count": 2}

    first_id = body["items"][0]["id"]
    res = await client.put(f"/notifications/{first_id}/read", headers=headers_for(alice))
    assert res.status_code == 200

    res = await client.get(
        "/notifications", params={"unread_only": True}, headers=headers_for(alice)
    )
    assert [n["message"] for n in res.json()["items"]] == ["first"]


@pytest.mark.asyncio
async def test_mark_all_read(client: AsyncClient, db, alice, bob, headers_for):
    message_service.send_message(db, bob.id, alice.id, "a")
    message_service.send_message(db, bob.id, alice.id, "b")

    res = await client.put("/notifications/read-all", headers=headers_for(alice))
    assert res.status_code == 200
    assert res.json()["updated"] == 2

    res = await client.get("/notifications/count", headers=headers_for(alice))
    assert res.json() == {"count": 0}


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(
    client: AsyncClient, db, alice, bob, headers_for
):
    message_service.send_message(db, bob.id, alice.id, "for alice")
    res = await client.get("/notifications", headers=headers_for(alice))
    notification_id = res.json()["items"][0]["id"]

    res = await client.put(f"/notifications/{notification_id}/read", headers=headers_for(bob))
    assert res.status_code == 404
    assert res.json()["code"] == "notification_not_found"
