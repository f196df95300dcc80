"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema recreated for each test
- Family and member fixtures with minted access tokens
- HTTPX AsyncClient wired to the app with get_db overridden
"""
import os
import tempfile
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings) are imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_AUTO_MIGRATE"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="family-sns-uploads-")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from family_sns.core.deps import get_db
from family_sns.core.security import create_access_token, hash_password
from family_sns.core.websocket import manager
from family_sns.db.base import Base
from family_sns.db.enums import Role
from family_sns.db.models import Family, User
from family_sns.db.session import SessionLocal, engine
from family_sns.main import app

TEST_PASSWORD = "secret123"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    The in-memory database lives on a single shared connection, so the
    app's own sessions (e.g. WebSocket auth) see the same rows.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_connection_manager() -> Generator[None, None, None]:
    """Drop any sockets a test left registered on the process-wide manager."""
    yield
    manager._connections.clear()
    manager._topics.clear()
    manager._subscriptions.clear()


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Argon2 is deliberately slow; hash the shared test password once."""
    return hash_password(TEST_PASSWORD)


def make_user(
    db: Session,
    family: Family,
    email: str,
    name: str,
    password_hash: str,
    role: Role = Role.MEMBER,
) -> User:
    user = User(
        family_id=family.id,
        email=email,
        password_hash=password_hash,
        name=name,
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def family(db: Session) -> Family:
    """Create a test family."""
    family = Family(name="Tanaka")
    db.add(family)
    db.commit()
    db.refresh(family)
    return family


@pytest.fixture(scope="function")
def other_family(db: Session) -> Family:
    family = Family(name="Suzuki")
    db.add(family)
    db.commit()
    db.refresh(family)
    return family


@pytest.fixture(scope="function")
def alice(db: Session, family: Family, password_hash: str) -> User:
    """Family admin."""
    return make_user(db, family, "alice@example.com", "Alice", password_hash, Role.ADMIN)


@pytest.fixture(scope="function")
def bob(db: Session, family: Family, password_hash: str) -> User:
    """Member of the same family as alice."""
    return make_user(db, family, "bob@example.com", "Bob", password_hash)


@pytest.fixture(scope="function")
def outsider(db: Session, other_family: Family, password_hash: str) -> User:
    """Member of a different family."""
    return make_user(db, other_family, "carol@example.com", "Carol", password_hash, Role.ADMIN)


# =============================================================================
# Auth Fixtures
# =============================================================================

def token_for(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        family_id=user.family_id,
        email=user.email,
        role=user.role,
    )


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}


@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(scope="function")
def alice_auth(alice: User) -> TestAuth:
    return TestAuth(user=alice, token=token_for(alice))


@pytest.fixture(scope="function")
def bob_auth(bob: User) -> TestAuth:
    return TestAuth(user=bob, token=token_for(bob))


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create unauthenticated AsyncClient; pass auth headers per request.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    alice_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient authenticated as alice."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=alice_auth.headers,
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    """Build bearer headers for any user: ``headers_for(bob)``."""
    return auth_headers
