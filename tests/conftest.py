"""
Pytest configuration and shared fixtures.

Tests run against a throwaway SQLite file; the language model is replaced
by FakeLLM through a FastAPI dependency override.
"""

import os
import asyncio
import tempfile
from pathlib import Path

# Must be set before taskboard.core.config is imported
_TEST_DB = Path(tempfile.mkdtemp(prefix="taskboard-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ.pop("ANTHROPIC_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

from taskboard.core.dependencies import get_llm_client
from taskboard.db.base import Base
from taskboard.db.session import engine
from taskboard.main import app
from taskboard.services.llm_client import LLMAPIError
import taskboard.models  # noqa: F401


class FakeLLM:
    """Stands in for the Anthropic client; replies with canned text or raises."""

    def __init__(self, reply: str = "[]", error: Exception = None, model: str = "test-model"):
        self.reply = reply
        self.error = error
        self.model = model
        self.calls = []

    async def complete(self, prompt: str, *, max_tokens: int) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")


async def _reset_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def reset_db():
    """Start every test with an empty task table."""
    asyncio.run(_reset_tables())
    yield


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(reset_db, fake_llm):
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_tasks(client, fake_llm):
    """Create tasks through the extraction endpoint; returns their JSON."""

    def _seed(drafts_json: str):
        fake_llm.reply = drafts_json
        response = client.post("/tasks/extract", json={"text": "seed"})
        assert response.status_code == 200, response.text
        return response.json()["tasks"]

    return _seed


def upstream_error(status_code, message="boom"):
    return LLMAPIError(message, status_code=status_code)
