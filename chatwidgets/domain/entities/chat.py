"""Chat turn and conversation history entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChatRole(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ChatTurn:
    """A single message in a conversation, optionally carrying widgets.

    Widgets are opaque dicts (``{"type": "button", ...}``); rendering them is
    the host's concern.
    """

    role: ChatRole
    content: str
    widgets: tuple[dict[str, Any], ...] = ()
    thread_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize turn for API responses."""
        data: dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
            "widgets": [dict(widget) for widget in self.widgets],
            "threadId": self.thread_id,
        }
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class ChatMessages:
    """Ordered turns of one conversation thread."""

    turns: tuple[ChatTurn, ...] = ()

    def append(self, turn: ChatTurn) -> "ChatMessages":
        return ChatMessages(turns=(*self.turns, turn))

    def __len__(self) -> int:
        return len(self.turns)
