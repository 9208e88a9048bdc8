"""Conversation storage implementations."""

from chatwidgets.infrastructure.storage.memory import (
    InMemoryPersonaStore,
    InMemoryThreadService,
)

__all__ = ["InMemoryThreadService", "InMemoryPersonaStore"]
