"""
Shared fixtures: a fresh SQLite database per test, two users, and a global
platform to hang secrets and credentials on.
"""

from __future__ import annotations

import pytest

import lockbox.models  # noqa: F401  (registers tables)
from lockbox.db.base import Base
from lockbox.db.session import build_engine, build_session_factory
from lockbox.models import Platform, PlatformStatus, User
from lockbox.schemas.user import Caller
from lockbox.security import crypto


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'vault.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def alice(session_factory) -> Caller:
    async with session_factory() as session:
        user = User(email="alice@example.com", name="Alice")
        session.add(user)
        await session.commit()
        return Caller(id=user.id, email=user.email)


@pytest.fixture
async def bob(session_factory) -> Caller:
    async with session_factory() as session:
        user = User(email="bob@example.com", name="Bob")
        session.add(user)
        await session.commit()
        return Caller(id=user.id, email=user.email)


@pytest.fixture
async def github(session_factory) -> Platform:
    """Global platform (no owner), visible to every user."""
    async with session_factory() as session:
        platform = Platform(name="GitHub", login_url="https://github.com/login", status=PlatformStatus.APPROVED)
        session.add(platform)
        await session.commit()
        return platform


@pytest.fixture
def envelope():
    """A real client-side style envelope for a throwaway value."""
    return crypto.seal("ghp_exampletoken123")
