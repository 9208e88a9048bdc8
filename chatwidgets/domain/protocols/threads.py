"""Conversation history and persona storage protocols."""

from typing import Protocol

from chatwidgets.domain.entities.chat import ChatMessages, ChatTurn


class ThreadService(Protocol):
    """Stores the turns of each conversation thread."""

    def create_thread(self) -> str:
        """Create an empty thread and return its id."""
        ...

    def thread_exists(self, thread_id: str) -> bool:
        ...

    def append_message(self, thread_id: str, turn: ChatTurn) -> ChatMessages:
        """Append a turn and return the updated history.

        Raises:
            ThreadNotFoundError: If the thread does not exist
        """
        ...

    def get_messages(self, thread_id: str) -> ChatMessages:
        """Raises ThreadNotFoundError if the thread does not exist."""
        ...

    def delete_thread(self, thread_id: str) -> bool:
        """Delete a thread. Returns False if it did not exist."""
        ...


class ThreadPersonaStore(Protocol):
    """Per-thread persona overrides."""

    def get_persona(self, thread_id: str) -> str | None:
        ...

    def set_persona(self, thread_id: str, persona: str) -> None:
        ...

    def clear_persona(self, thread_id: str) -> None:
        ...
