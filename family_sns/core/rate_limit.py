"""Rate limiting for the authentication endpoints."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from family_sns.core.config import settings

# Single-process deployment: counters live in memory
IS_TESTING = settings.ENV == "test" or os.getenv("TESTING", "").lower() in ("1", "true", "yes")

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=not IS_TESTING and settings.RATE_LIMIT_AUTH > 0,
)


def auth_rate_limit() -> str:
    """Per-client limit string for login/registration attempts."""
    return f"{max(settings.RATE_LIMIT_AUTH, 1)}/minute"
