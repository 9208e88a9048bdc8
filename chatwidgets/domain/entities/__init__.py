"""Domain entities - pure Python dataclasses representing chat objects."""

from chatwidgets.domain.entities.chat import ChatMessages, ChatRole, ChatTurn

__all__ = [
    "ChatRole",
    "ChatTurn",
    "ChatMessages",
]
