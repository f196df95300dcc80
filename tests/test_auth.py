"""Tests for registration, joining, login and credential verification."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import AsyncClient

from family_sns.core.config import settings
from family_sns.db.models import Family, User


REGISTER_BODY = {
    "email": "Mom@Example.com",
    "password": "secret123",
    "name": "Mom",
    "familyName": "Yamada",
}


@pytest.mark.asyncio
async def test_register_login_verify_round_trip(client: AsyncClient, db):
    """Register -> Login -> Verify resolves to the same user."""
    res = await client.post("/auth/register", json=REGISTER_BODY)
    assert res.status_code == 201
    registered = res.json()
    assert registered["user"]["email"] == "mom@example.com"
    assert registered["user"]["role"] == "admin"
    assert registered["user"]["family_name"] == "Yamada"
    assert "password_hash" not in registered["user"]

    res = await client.post(
        "/auth/login", json={"email": "mom@example.com", "password": "secret123"}
    )
    assert res.status_code == 200
    token = res.json()["token"]

    res = await client.get("/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.json()["user"]["id"] == registered["user"]["id"]

    family = db.query(Family).one()
    assert family.id == registered["user"]["family_id"]


@pytest.mark.asyncio
async def test_register_duplicate_email_rejected(client: AsyncClient, db):
    res = await client.post("/auth/register", json=REGISTER_BODY)
    assert res.status_code == 201

    res = await client.post("/auth/register", json={**REGISTER_BODY, "email": "MOM@example.com"})
    assert res.status_code == 400
    assert res.json()["code"] == "duplicate_email"
    # No orphan family from the failed attempt
    assert db.query(Family).count() == 1


@pytest.mark.asyncio
async def test_register_short_password_is_400(client: AsyncClient):
    res = await client.post("/auth/register", json={**REGISTER_BODY, "password": "123"})
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_register_missing_family_name_is_400(client: AsyncClient):
    body = {k: v for k, v in REGISTER_BODY.items() if k != "familyName"}
    res = await client.post("/auth/register", json=body)
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_join_family_with_invite_code(client: AsyncClient, db, family, alice):
    res = await client.post(
        "/auth/join-family",
        json={
            "email": "kid@example.com",
            "password": "secret123",
            "name": "Kid",
            "familyCode": family.id,
        },
    )
    assert res.status_code == 201
    user = res.json()["user"]
    assert user["family_id"] == family.id
    assert user["role"] == "member"
    assert db.query(User).filter(User.family_id == family.id).count() == 2


@pytest.mark.asyncio
async def test_join_unknown_family_is_404(client: AsyncClient, db):
    res = await client.post(
        "/auth/join-family",
        json={
            "email": "kid@example.com",
            "password": "secret123",
            "name": "Kid",
            "family_code": "does-not-exist",
        },
    )
    assert res.status_code == 404
    assert res.json()["code"] == "family_not_found"


@pytest.mark.asyncio
async def test_join_family_duplicate_email(client: AsyncClient, family, alice):
    res = await client.post(
        "/auth/join-family",
        json={
            "email": alice.email,
            "password": "secret123",
            "name": "Again",
            "familyCode": family.id,
        },
    )
    assert res.status_code == 400
    assert res.json()["code"] == "duplicate_email"


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_the_same(client: AsyncClient, alice):
    wrong = await client.post("/auth/login", json={"email": alice.email, "password": "nope-nope"})
    unknown = await client.post(
        "/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"}
    )
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client: AsyncClient, db, alice):
    alice.is_active = False
    db.commit()

    res = await client.post("/auth/login", json={"email": alice.email, "password": "secret123"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_verify_requires_token(client: AsyncClient):
    res = await client.get("/auth/verify")
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_verify_rejects_token_signed_with_other_secret(client: AsyncClient, alice_auth):
    claims = jwt.decode(alice_auth.token, options={"verify_signature": False})
    tampered = jwt.encode(claims, "not-the-server-secret", algorithm="HS256")
    res = await client.get("/auth/verify", headers={"Authorization": f"Bearer {tampered}"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_verify_rejects_expired_token(client: AsyncClient, alice):
    past = datetime.now(timezone.utc) - timedelta(days=8)
    token = jwt.encode(
        {
            "sub": alice.id,
            "family_id": alice.family_id,
            "email": alice.email,
            "role": alice.role,
            "iat": past,
            "exp": past + timedelta(days=7),
        },
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    res = await client.get("/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_verify_rejects_deleted_user(client: AsyncClient, db, alice_auth):
    db.delete(alice_auth.user)
    db.commit()

    res = await client.get("/auth/verify", headers=alice_auth.headers)
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_protected_endpoint_requires_session(client: AsyncClient):
    res = await client.get("/posts", params={"familyId": "x"})
    assert res.status_code == 401
