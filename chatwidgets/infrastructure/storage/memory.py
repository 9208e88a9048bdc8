"""In-memory thread and persona stores.

Suitable for development and single-process deployments; contents are lost
on restart.
"""

import threading
from uuid import uuid4

from chatwidgets.domain.entities.chat import ChatMessages, ChatTurn
from chatwidgets.domain.errors import ThreadNotFoundError
from chatwidgets.domain.protocols.threads import ThreadPersonaStore, ThreadService
from chatwidgets.infrastructure.telemetry import get_logger

logger = get_logger(__name__)


def _thread_not_found(thread_id: str) -> ThreadNotFoundError:
    return ThreadNotFoundError(
        message=f"Thread with ID '{thread_id}' not found.",
        thread_id=thread_id,
    )


class InMemoryThreadService:
    """Thread history held in a process-local dict."""

    def __init__(self) -> None:
        self._threads: dict[str, ChatMessages] = {}
        self._lock = threading.Lock()

    def create_thread(self) -> str:
        thread_id = str(uuid4())
        with self._lock:
            self._threads[thread_id] = ChatMessages()
        logger.debug("Created thread", extra={"thread_id": thread_id})
        return thread_id

    def thread_exists(self, thread_id: str) -> bool:
        return thread_id in self._threads

    def append_message(self, thread_id: str, turn: ChatTurn) -> ChatMessages:
        with self._lock:
            messages = self._threads.get(thread_id)
            if messages is None:
                raise _thread_not_found(thread_id)
            messages = messages.append(turn)
            self._threads[thread_id] = messages
        return messages

    def get_messages(self, thread_id: str) -> ChatMessages:
        messages = self._threads.get(thread_id)
        if messages is None:
            raise _thread_not_found(thread_id)
        return messages

    def delete_thread(self, thread_id: str) -> bool:
        with self._lock:
            return self._threads.pop(thread_id, None) is not None


class InMemoryPersonaStore:
    """Per-thread persona overrides held in a process-local dict."""

    def __init__(self) -> None:
        self._personas: dict[str, str] = {}

    def get_persona(self, thread_id: str) -> str | None:
        return self._personas.get(thread_id)

    def set_persona(self, thread_id: str, persona: str) -> None:
        self._personas[thread_id] = persona

    def clear_persona(self, thread_id: str) -> None:
        self._personas.pop(thread_id, None)


# Protocol compliance
_thread_service: type[ThreadService] = InMemoryThreadService  # type: ignore
_persona_store: type[ThreadPersonaStore] = InMemoryPersonaStore  # type: ignore
