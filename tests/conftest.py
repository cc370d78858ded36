"""Shared fixtures: in-memory SQLite database and an ASGI test client."""

import os

# Must be set before wewatch.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import wewatch.models  # noqa: F401
from wewatch.core.security import TokenPayload, create_access_token
from wewatch.database import Base, get_db
from wewatch.main import create_app
from wewatch.models.movie import Movie
from wewatch.models.profile import Profile
from wewatch.models.user import User


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(session_maker):
    app = create_app()

    async def _get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(session_maker):
    """Insert a user (with profile) and return ``(user, auth_headers)``."""

    async def _make(email: str = "ana@example.com", nickname: str = "Ana", with_profile: bool = True):
        async with session_maker() as session:
            user = User(email=email, password_hash="not-a-real-hash", nickname=nickname)
            session.add(user)
            await session.flush()
            if with_profile:
                session.add(Profile(user_id=user.id, members=[nickname]))
            await session.commit()
            await session.refresh(user)

        token = create_access_token(TokenPayload(user_id=user.id, email=email, nickname=nickname))
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def make_movie(session_maker):
    """Insert a movie row directly, bypassing the API."""

    async def _make(user_id: int, link: str, preview_image_url: str | None = None, **kwargs):
        async with session_maker() as session:
            movie = Movie(
                user_id=user_id,
                name=kwargs.pop("name", "Some movie"),
                link=link,
                status=kwargs.pop("status", "NEED_TO_WATCH"),
                preview_image_url=preview_image_url,
                **kwargs,
            )
            session.add(movie)
            await session.commit()
            await session.refresh(movie)
            return movie

    return _make
