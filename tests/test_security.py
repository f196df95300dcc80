"""Tests for access tokens and password hashing."""
import jwt
import pytest
from pydantic import ValidationError

from family_sns.core import security
from family_sns.core.config import DEV_JWT_SECRET, Settings, settings


def _token() -> str:
    return security.create_access_token(
        user_id="u1", family_id="f1", email="a@example.com", role="admin"
    )


def test_token_round_trip_carries_identity_claims():
    payload = security.decode_access_token(_token())
    assert payload["sub"] == "u1"
    assert payload["family_id"] == "f1"
    assert payload["email"] == "a@example.com"
    assert payload["role"] == "admin"
    assert payload["exp"] - payload["iat"] == settings.JWT_EXPIRES_HOURS * 3600


def test_previous_secret_still_accepted_during_rotation(monkeypatch):
    old_token = _token()
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", settings.JWT_SECRET)
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")

    assert security.decode_access_token(old_token)["sub"] == "u1"


def test_unknown_secret_rejected(monkeypatch):
    old_token = _token()
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "")

    with pytest.raises(jwt.InvalidSignatureError):
        security.decode_access_token(old_token)


def test_token_missing_family_claim_rejected():
    token = jwt.encode(
        {"sub": "u1", "role": "admin", "exp": 9999999999},
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(jwt.MissingRequiredClaimError):
        security.decode_access_token(token)


def test_password_hash_verifies():
    hashed = security.hash_password("secret123")
    assert hashed != "secret123"
    assert security.verify_password("secret123", hashed) is True
    assert security.verify_password("wrong", hashed) is False


def test_verify_against_missing_hash_is_false():
    assert security.verify_password("anything", None) is False


def test_verify_against_garbage_hash_is_false():
    assert security.verify_password("anything", "not-an-argon2-hash") is False


def test_default_secret_refused_outside_dev(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ENV="prod")


def test_default_secret_allowed_in_dev(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    assert Settings(_env_file=None, ENV="dev").JWT_SECRET == DEV_JWT_SECRET


def test_real_secret_accepted_in_prod():
    assert Settings(_env_file=None, ENV="prod", JWT_SECRET="s3cret").JWT_SECRET == "s3cret"
