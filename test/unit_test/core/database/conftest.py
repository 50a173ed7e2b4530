"""Test configuration for database unit tests.

This module provides common fixtures for testing the centralized database
layer against an in-memory SQLite database.
"""

from __future__ import annotations

from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from truthshield.core.database.base import Base
from truthshield.core.database.entities import GameSession, Threat, User
from truthshield.core.models.domain import AgeGroup, Difficulty, GameType, Persona, Severity, ThreatSource, ThreatType


@pytest_asyncio.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async_session = async_sessionmaker(in_memory_engine, expire_on_commit=False)

    async with async_session() as session:
        yield session


@pytest.fixture(scope="function")
def sample_user_data() -> dict:
    """Sample user data for testing."""
    return {
        "email": "Parent@Example.com",
        "password_hash": "$2b$04$hash",
        "first_name": "Pat",
        "last_name": "Parent",
        "age": 40,
        "age_group": AgeGroup.ADULT,
        "persona": Persona.INDIVIDUAL,
    }


@pytest.fixture(scope="function")
def sample_threat_data() -> dict:
    """Sample threat data for testing, without the owning user."""
    return {
        "type": ThreatType.PHISHING,
        "severity": Severity.HIGH,
        "source": ThreatSource.EMAIL,
        "detected_content": "Verify your account now",
        "indicators": ["verify", "urgent"],
        "age_group": AgeGroup.ADULT,
        "confidence": 85.0,
    }


@pytest.fixture(scope="function")
def make_user(in_memory_session: AsyncSession, sample_user_data: dict) -> Callable[..., Awaitable[User]]:
    """Persist a user built from ``sample_user_data`` with overrides."""

    async def _make(**overrides) -> User:
        user = User(**{**sample_user_data, **overrides})
        in_memory_session.add(user)
        await in_memory_session.commit()
        await in_memory_session.refresh(user)
        return user

    return _make


@pytest.fixture(scope="function")
def make_threat(in_memory_session: AsyncSession, sample_threat_data: dict) -> Callable[..., Awaitable[Threat]]:
    async def _make(user: User, **overrides) -> Threat:
        threat = Threat(user_id=user.id, **{**sample_threat_data, **overrides})
        in_memory_session.add(threat)
        await in_memory_session.commit()
        await in_memory_session.refresh(threat)
        return threat

    return _make


@pytest.fixture(scope="function")
def make_game_session(in_memory_session: AsyncSession) -> Callable[..., Awaitable[GameSession]]:
    async def _make(user: User, **overrides) -> GameSession:
        data = {
            "user_id": user.id,
            "game_type": GameType.SCAM_SPOTTER,
            "age_group": user.age_group,
            "difficulty": Difficulty.EASY,
            **overrides,
        }
        game_session = GameSession(**data)
        in_memory_session.add(game_session)
        await in_memory_session.commit()
        await in_memory_session.refresh(game_session)
        return game_session

    return _make
