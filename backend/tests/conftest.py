from __future__ import annotations
import uuid
import httpx
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from contestjudge.db import Base, get_session
from contestjudge.main import app
from contestjudge.models.user import User
from contestjudge.security import make_access_token


@pytest_asyncio.fixture
async def sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'contestjudge.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(sessionmaker):
    async def _session():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(sessionmaker):
    """Create a user row and return (user_id, auth headers)."""
    async def _make(name: str = "user") -> tuple[str, dict[str, str]]:
        async with sessionmaker() as session:
            user = User(email=f"{name}-{uuid.uuid4().hex[:8]}@ex.com", name=name)
            session.add(user)
            await session.commit()
            uid = str(user.id)
        return uid, {"Authorization": f"Bearer {make_access_token(uid)}"}
    return _make
