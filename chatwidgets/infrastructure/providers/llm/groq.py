"""Groq LLM provider implementation."""

import httpx

from chatwidgets.config import Settings
from chatwidgets.domain.errors import (
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from chatwidgets.domain.protocols.providers import LLMMessage, LLMProvider, LLMResponse
from chatwidgets.infrastructure.telemetry import get_logger

logger = get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqProvider:
    """Groq LLM provider using their OpenAI-compatible REST API."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.api_key = settings.groq_api_key
        self.default_model = settings.default_llm_model
        self.base_url = GROQ_BASE_URL
        self._client = client

    @property
    def provider_name(self) -> str:
        return "groq"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def chat(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Generate a chat completion.

        Raises:
            ProviderRateLimitError: On HTTP 429
            ProviderUnavailableError: On HTTP 5xx
            ProviderTimeoutError: If the request times out
            ProviderError: On any other HTTP error
        """
        model = model or self.default_model

        payload = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        logger.debug(
            "Calling Groq API",
            extra={"model": model, "message_count": len(messages)},
        )

        try:
            response = await self.client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                message="Groq request timed out",
                provider="groq",
                operation="chat",
            ) from e

        if response.status_code == 429:
            raise ProviderRateLimitError(
                message="Groq rate limit exceeded",
                provider="groq",
                operation="chat",
                retry_after_seconds=_retry_after_seconds(response),
            )

        if response.status_code >= 500:
            raise ProviderUnavailableError(
                message=f"Groq service error: {response.status_code}",
                provider="groq",
                operation="chat",
            )

        if response.status_code >= 400:
            raise ProviderError(
                message=f"Groq rejected request: {response.status_code}",
                provider="groq",
                operation="chat",
                details={"status_code": response.status_code},
            )

        data = response.json()
        choice = data["choices"][0]
        usage = data.get("usage", {})

        return LLMResponse(
            content=choice["message"].get("content") or "",
            model=model,
            tokens_in=usage.get("prompt_tokens", 0),
            tokens_out=usage.get("completion_tokens", 0),
            finish_reason=choice.get("finish_reason"),
        )


# Protocol compliance
_: type[LLMProvider] = GroqProvider  # type: ignore


def _retry_after_seconds(response: httpx.Response, default: int = 60) -> int:
    value = response.headers.get("retry-after", "")
    return int(value) if value.isdigit() else default
