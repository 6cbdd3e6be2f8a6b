"""Shared fixtures and utilities for tests."""

import os

# Settings are read when core.config is first imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CELERY_BROKER_URL", "redis://localhost:6379/1")
os.environ.setdefault("CELERY_RESULT_BACKEND", "redis://localhost:6379/2")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("CREDENTIALS_ENCRYPTION_KEY", "0123456789abcdef0123456789abcdef")
os.environ.setdefault("EVENT_DISPATCH_MODE", "inline")
os.environ.setdefault("AI_RETRY_BASE_DELAY", "0")

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import jwt
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401
from agents.registry import registry
from core.config import settings
from database.engine import Base
from database.models import Interview, Response

# Service modules that open sessions from the module-level session maker
SESSION_USERS = (
    "api.services.ats",
    "api.services.candidate_filtering",
    "api.services.candidate_profiles",
    "api.services.event_dispatch",
    "api.services.responses",
    "api.services.skill_assessments",
)


@pytest.fixture
async def test_engine():
    """In-memory SQLite database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine, monkeypatch):
    """Session maker bound to the test database, patched into every service."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    for module in SESSION_USERS:
        monkeypatch.setattr(f"{module}.AsyncSessionLocal", factory)
    return factory


@pytest.fixture
def add(session_factory):
    """Persist rows and return them refreshed (one row or a list)."""

    async def _add(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
            for row in rows:
                await session.refresh(row)
        return rows[0] if len(rows) == 1 else list(rows)

    return _add


@pytest.fixture
async def interview(add):
    return await add(
        Interview(name="Backend Engineer", organization_id="org_1", user_id="manager_1")
    )


@pytest.fixture
def make_response(add, interview):
    """Create a candidate response for the default interview."""

    async def _make(**fields):
        fields.setdefault("name", "Ada Lovelace")
        fields.setdefault("email", "ada@example.com")
        fields.setdefault("interview_id", interview.id)
        return await add(Response(**fields))

    return _make


@pytest.fixture(autouse=True)
def reset_agents():
    """Drop agent instances so overrides never leak between tests."""
    registry.reset()
    yield
    registry.reset()


class FakeAgent:
    """Agent stand-in returning a fixed result."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    async def process(self, input_data):
        self.calls.append(input_data)
        return self.result


@pytest.fixture
def fake_agent():
    """Install a FakeAgent under a registry name."""

    def _install(name, result):
        agent = FakeAgent(result)
        registry.override(name, agent)
        return agent

    return _install


def fake_genai_client(*replies):
    """
    Object shaped like ``genai.Client`` whose ``generate_content`` yields the
    given replies in order. Exceptions in ``replies`` are raised.
    """
    side_effect = [
        reply if isinstance(reply, Exception) else SimpleNamespace(text=reply)
        for reply in replies
    ]
    generate = AsyncMock(side_effect=side_effect)
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))


def make_token(user_id="user_1", organization_id="org_1", expires_in=3600, **claims):
    payload = {
        "sub": user_id,
        "org_id": organization_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}
