"""LLM provider implementations."""

from chatwidgets.infrastructure.providers.llm.groq import GroqProvider

__all__ = ["GroqProvider"]
