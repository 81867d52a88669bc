"""Shared pytest fixtures for all test suites."""

import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from itinerary_ai.config import Settings
from itinerary_ai.db.models import Base
from itinerary_ai.models.envelope import ChatMessage, ProviderEnvelope

Reply = str | None | BaseException


class ScriptedAdapter:
    """Provider adapter that replays scripted replies and records conversations.

    Each reply is returned as envelope text, or raised when it is an exception.
    Once the script is exhausted the last reply repeats.
    """

    def __init__(self, name: str, replies: list[Reply]) -> None:
        self.name = name
        self._replies = list(replies)
        self.conversations: list[list[ChatMessage]] = []

    @property
    def calls(self) -> int:
        return len(self.conversations)

    @property
    def prompts(self) -> list[str]:
        return [conversation[-1].content for conversation in self.conversations]

    async def submit(self, conversation: list[ChatMessage]) -> ProviderEnvelope:
        self.conversations.append(conversation)
        index = min(len(self.conversations) - 1, len(self._replies) - 1)
        reply = self._replies[index]
        if isinstance(reply, BaseException):
            raise reply
        return ProviderEnvelope.from_text(reply)


def itinerary_payload(
    days: int = 2,
    activities_per_day: int = 2,
    currency: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Valid camelCase itinerary payload."""
    payload: dict[str, Any] = {
        "days": [
            {
                "dayNumber": day,
                "date": f"2025-03-0{day}",
                "activities": [
                    {
                        "time": f"{9 + index}:00",
                        "title": f"Activity {day}.{index}",
                        "description": "Something to do",
                        "durationMinutes": 90,
                        "cost": 10,
                    }
                    for index in range(1, activities_per_day + 1)
                ],
            }
            for day in range(1, days + 1)
        ],
        "totalCost": 40,
        "notes": ["Bring sunscreen"],
    }
    if currency is not None:
        payload["currency"] = currency
    payload.update(extra)
    return payload


@pytest.fixture
def make_adapter() -> Callable[[str, list[Reply]], ScriptedAdapter]:
    """Factory for scripted provider adapters."""
    return ScriptedAdapter


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for valid itinerary payloads."""
    return itinerary_payload


@pytest.fixture
def payload_json() -> Callable[..., str]:
    """Factory for itinerary payloads serialized to JSON text."""

    def _make(**kwargs: Any) -> str:
        return json.dumps(itinerary_payload(**kwargs))

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env file."""
    return Settings(
        _env_file=None,
        gemini_api_key="test-gemini",
        openrouter_api_key="test-openrouter",
        provider_timeout_seconds=1.0,
        ai_preview_cache_ttl_seconds=900,
        ai_preview_memory_ttl_seconds=600,
    )


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
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
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the SQLite engine."""
    return async_sessionmaker(bind=sqlite_engine, expire_on_commit=False)
