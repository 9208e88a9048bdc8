"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest

from chatwidgets.config import Settings
from chatwidgets.core.di import ServiceCollection
from chatwidgets.domain.protocols.providers import LLMResponse


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        environment="development",
        groq_api_key="test_groq_key",
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def services() -> ServiceCollection:
    """Empty service collection."""
    return ServiceCollection()


@pytest.fixture
def mock_llm_provider():
    """Mock LLM provider answering every prompt with 'HelpRequest'."""
    provider = AsyncMock()
    provider.provider_name = "mock"
    provider.chat = AsyncMock(
        return_value=LLMResponse(content="HelpRequest", model="mock-model")
    )
    return provider
