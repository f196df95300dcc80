"""Security utilities for access tokens and password hashing."""

from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from family_sns.core.config import settings


JWT_ALGORITHM = "HS256"

# Argon2id with library defaults (memory-hard)
_password_hasher = PasswordHasher()

# Verified against when the email is unknown so both login paths cost the same.
_DUMMY_HASH = _password_hasher.hash("dummy-password-for-timing")


# =============================================================================
# Access Token (JWT bearer)
# =============================================================================

def create_access_token(
    user_id: str,
    family_id: str,
    email: str,
    role: str,
) -> str:
    """
    Create signed access JWT.

    Always signs with current secret (JWT_SECRET).
    Token carries the user identity and family context.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "family_id": str(family_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify access JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "family_id", "role", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            # A valid signature with a past exp will not improve with another key
            raise
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Check a password against a stored hash.

    When ``password_hash`` is None a dummy hash is verified instead, so a
    missing account takes as long to reject as a wrong password.
    """
    if password_hash is None:
        try:
            _password_hasher.verify(_DUMMY_HASH, password)
        except VerificationError:
            pass
        return False

    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when the stored hash was made with outdated parameters."""
    return _password_hasher.check_needs_rehash(password_hash)
