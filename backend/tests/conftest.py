"""
Vibe Backend — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets its own in-memory SQLite engine with the schema
       created, so tests never share rows. API tests reach the same engine
       through a dependency override of get_db_session.

Fixture Hierarchy:
    db_engine   → fresh engine + tables per test
    db_session  → AsyncSession on that engine (service-level tests)
    make_user   → factory that inserts a user and returns the ORM row
    test_client → HTTPX AsyncClient wired to the app and db_engine
    register    → factory that registers through the API, returns (user, token)
"""

import os

# Settings are read at import time; set them before importing vibe.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256-signing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

from itertools import count
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vibe.database import build_engine, create_tables, get_db_session, session_scope
from vibe.models import User
from vibe.security import hash_password

DEFAULT_PASSWORD = "password123"

_user_seq = count(1)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """
    Insert a user straight into the database.

    Usage:
        alice = await make_user(first_name="Alice")
    """

    async def _make_user(**overrides) -> User:
        n = next(_user_seq)
        fields = {
            "email": f"user{n}@example.com",
            "username": f"user{n}",
            "first_name": f"First{n}",
            "last_name": f"Last{n}",
            "password_hash": hash_password(DEFAULT_PASSWORD),
        }
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest_asyncio.fixture
async def test_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX client talking to the app through ASGITransport.

    ASGITransport does not run the lifespan; tables come from db_engine.
    """
    from vibe.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_scope(factory) as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register(test_client):
    """
    Register an account through the API.

    Returns (user JSON, bearer token).
    """

    async def _register(**overrides):
        n = next(_user_seq)
        body = {
            "email": f"member{n}@example.com",
            "username": f"member{n}",
            "password": DEFAULT_PASSWORD,
            "firstName": f"Member{n}",
            "lastName": "Tester",
        }
        body.update(overrides)
        response = await test_client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return data["user"], data["token"]

    return _register
