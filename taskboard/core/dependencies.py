"""
FastAPI dependencies for the application.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.db.session import AsyncSessionLocal
from taskboard.services.llm_client import AnthropicClient, LLMClient


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def get_llm_client() -> LLMClient:
    """
    Dependency to get the language model client used for extraction.

    Tests override this to avoid network calls.
    """
    return AnthropicClient(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.ANTHROPIC_MODEL,
        base_url=settings.ANTHROPIC_BASE_URL,
        api_version=settings.ANTHROPIC_VERSION,
        timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
    )
