"""Shared fixtures: an in-memory SQLite database per test, users and stub classifiers."""
import asyncio
import os

# before nadfeud is imported, Settings reads the environment at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AI_BACKEND"] = "mock"
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG_DIR"] = ""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nadfeud.core.auth import AuthSession
from nadfeud.models import Base, User
from nadfeud.services.grouping_service import ClassificationErr, ClassificationOk, GroupSpec


@pytest_asyncio.fixture
async def engine():
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
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(
    db: AsyncSession,
    username: str,
    *,
    can_vote: bool = True,
    is_admin: bool = False,
    roles: list[str] | None = None,
    total_score: int = 0,
) -> User:
    user = User(
        id=str(uuid.uuid4()),
        discord_id=f"discord-{username}",
        username=username,
        total_score=total_score,
        discord_roles=roles or [],
        can_vote=can_vote,
        is_admin=is_admin,
    )
    db.add(user)
    await db.commit()
    return user


async def score_of(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(select(User.total_score).where(User.id == user_id))
    return result.scalar_one()


@pytest_asyncio.fixture
async def admin(db) -> AuthSession:
    user = await make_user(db, "admin", is_admin=True)
    return AuthSession.from_user(user)


class StubClassifier:
    """Returns a fixed result (or raises) and records every call."""

    def __init__(self, groups: list[dict] | None = None, *, error: str | None = None, exc: Exception | None = None):
        self.groups = groups or []
        self.error = error
        self.exc = exc
        self.calls: list[tuple[str, list[str]]] = []

    async def classify(self, question: str, answers: list[str]):
        self.calls.append((question, list(answers)))
        if self.exc is not None:
            raise self.exc
        if self.error is not None:
            return ClassificationErr(self.error)
        return ClassificationOk([GroupSpec(**g) for g in self.groups])


class BlockingClassifier(StubClassifier):
    """Waits for `release` before answering, so a test can act while an ending is in flight."""

    def __init__(self, groups: list[dict] | None = None, *, delay: float | None = None):
        super().__init__(groups)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.delay = delay

    async def classify(self, question: str, answers: list[str]):
        self.entered.set()
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        else:
            await self.release.wait()
        return await super().classify(question, answers)
