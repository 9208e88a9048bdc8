"""Provider protocols - abstract interfaces for external services."""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class LLMMessage:
    """A message for LLM chat completion."""

    role: str  # 'system', 'user', 'assistant'
    content: str


@dataclass
class LLMResponse:
    """Response from LLM provider."""

    content: str
    model: str
    tokens_in: int = 0
    tokens_out: int = 0
    finish_reason: str | None = None


class LLMProvider(Protocol):
    """Abstract interface for LLM providers used by classifiers."""

    @property
    def provider_name(self) -> str:
        """Get the provider name for logging/metrics."""
        ...

    async def chat(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Generate a chat completion."""
        ...
