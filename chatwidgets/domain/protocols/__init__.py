"""Domain protocols - abstract interfaces for infrastructure implementations."""

from chatwidgets.domain.protocols.providers import LLMMessage, LLMProvider, LLMResponse
from chatwidgets.domain.protocols.threads import ThreadPersonaStore, ThreadService

__all__ = [
    # Providers
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    # Conversation storage
    "ThreadService",
    "ThreadPersonaStore",
]
