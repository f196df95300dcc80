"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from family_sns.core.exceptions import AuthenticationError, UserNotFound
from family_sns.db.session import SessionLocal
from family_sns.schemas.auth import UserSession


AUTH_HEADER = "Authorization"
BEARER_PREFIX = "bearer "
CONNECTION_ID_HEADER = "X-Connection-Id"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    Uncommitted work is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_bearer_token(request: Request) -> str | None:
    """Extract the credential from ``Authorization: Bearer <token>``."""
    header = request.headers.get(AUTH_HEADER)
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
) -> UserSession:
    """
    Get the authenticated identity from the bearer credential.

    This is the PRIMARY auth dependency for protected endpoints.

    Raises:
        HTTPException 401: Missing/invalid/expired credential or unknown user
    """
    # Import here to avoid circular imports
    from family_sns.services import auth_service

    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user = auth_service.verify_credential(db, token)
    except UserNotFound:
        raise HTTPException(status_code=401, detail="User not found")
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)

    return UserSession(
        user_id=user.id,
        family_id=user.family_id,
        role=user.role,
        email=user.email,
        name=user.name,
    )


def get_connection_id(request: Request) -> str | None:
    """Socket connection id of the caller, used to skip echoing its own events."""
    return request.headers.get(CONNECTION_ID_HEADER) or None


# =============================================================================
# Permission Check Helpers
# =============================================================================

def require_family_access(session: UserSession, family_id: str) -> None:
    """Reject queries that name a family other than the caller's."""
    if family_id != session.family_id:
        raise HTTPException(status_code=403, detail="Not a member of this family")


def require_same_actor(session: UserSession, claimed_user_id: str | None) -> None:
    """
    Reject a body/query user id that disagrees with the credential.

    Older clients send userId/senderId explicitly; the credential wins.
    """
    if claimed_user_id and claimed_user_id != session.user_id:
        raise HTTPException(status_code=403, detail="User id does not match credential")
