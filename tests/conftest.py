"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, ProfileModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.change_hub import ChangeHub


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def change_hub() -> ChangeHub:
    return ChangeHub(queue_size=100)


@pytest.fixture
def make_profile(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Any]:
    """Insert a profile row and return its id."""

    async def _make(
        email: str | None = None,
        display_name: str | None = None,
        user_id: UUID | None = None,
    ) -> UUID:
        profile_id = user_id or uuid4()
        async with session_factory() as session:
            session.add(
                ProfileModel(
                    id=profile_id,
                    email=email or f"{profile_id.hex[:8]}@example.com",
                    display_name=display_name,
                )
            )
            await session.commit()
        return profile_id

    return _make


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def other_user() -> TokenUser:
    """A second user to share folders with."""
    return TokenUser(id=uuid4(), email="friend@example.com", display_name="Friend")


@pytest.fixture
def other_headers(auth_provider: JWTAuthProvider, other_user: TokenUser) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_provider.create_token(other_user)}"}


@pytest.fixture
async def app(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    change_hub: ChangeHub,
    make_profile: Callable[..., Any],
    test_user: TokenUser,
    other_user: TokenUser,
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[Any, None]:
    """
    Create an app wired to the test database.

    - Uses an in-memory SQLite database
    - Injects both test user profiles into the database
    - Validates bearer tokens with the HS256 test provider
    - Overrides every service to use the test UoW factory and change hub
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_change_hub,
        get_folder_service,
        get_preference_service,
        get_profile_service,
        get_todo_service,
    )
    from domain.services.folder_service import FolderService
    from domain.services.preference_service import PreferenceService
    from domain.services.profile_service import ProfileService
    from domain.services.todo_service import TodoService
    from main import create_app

    app = create_app()

    for user in (test_user, other_user):
        await make_profile(email=user.email, display_name=user.display_name, user_id=user.id)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_change_hub] = lambda: change_hub
    app.dependency_overrides[get_todo_service] = lambda: TodoService(uow_factory, change_hub)
    app.dependency_overrides[get_folder_service] = lambda: FolderService(uow_factory, change_hub)
    app.dependency_overrides[get_preference_service] = lambda: PreferenceService(uow_factory)
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(uow_factory)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    app: Any, auth_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Client that sends the test user's bearer token on every request."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c


@pytest.fixture
async def anonymous_client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Client for the wired app without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
