"""Fixtures communes / Shared fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "true")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import garage.models  # noqa: F401
from garage.database import Base, get_db
from garage.errors import IdentityError
from garage.main import app
from garage.models.user import UserProfile
from garage.rate_limit import limiter
from garage.services.identity import IdentityClaims, get_identity_provider
from garage.utils.auth import create_access_token


class FakeIdentityProvider:
    """Le jeton est l'identifiant externe ; 'bad' est refuse / The token is the external id."""

    async def sign_in(self, id_token: str) -> IdentityClaims:
        if id_token == "bad":
            raise IdentityError("Invalid identity token")
        return IdentityClaims(
            external_id=id_token,
            email=f"{id_token}@example.com",
            display_name=id_token.title(),
        )


@pytest.fixture
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
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_identity_provider] = FakeIdentityProvider
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
async def auth_headers(session_factory):
    """En-tetes d'un profil verifie / Headers for a verified profile."""
    async with session_factory() as session:
        profile = UserProfile(
            external_id="owner-1", email="owner@example.com", display_name="Owner", verified=True
        )
        session.add(profile)
        await session.commit()
        token = create_access_token(profile.id)
    return {"Authorization": f"Bearer {token}"}
