"""Typed accessors for the metadata agents pass to each other.

``ChatRequest.metadata`` is an open dict. These helpers fix the key names and
check the shape of stored values, so a getter returns None both when the key
is missing and when it holds something of the wrong type.
"""

from enum import Enum
from typing import Any, TypeVar

from chatwidgets.application.agents.request import ChatRequest

C = TypeVar("C", bound=Enum)

CLASSIFICATION_KEY = "Classification"
USER_MESSAGE_KEY = "UserMessage"
PERSONA_KEY = "Persona"
ROUTED_AGENT_KEY = "RoutedAgent"
PREVIOUS_RESULT_KEY = "PreviousResult"


def set_classification(request: ChatRequest, category: Enum) -> None:
    request.metadata[CLASSIFICATION_KEY] = category


def get_classification(request: ChatRequest, category_type: type[C]) -> C | None:
    """Get the classification if it is a member of ``category_type``."""
    value = request.metadata.get(CLASSIFICATION_KEY)
    return value if isinstance(value, category_type) else None


def set_user_message(request: ChatRequest, message: str) -> None:
    request.metadata[USER_MESSAGE_KEY] = message


def get_user_message(request: ChatRequest) -> str | None:
    value = request.metadata.get(USER_MESSAGE_KEY)
    return value if isinstance(value, str) else None


def set_persona(request: ChatRequest, persona: str) -> None:
    request.metadata[PERSONA_KEY] = persona


def get_persona(request: ChatRequest) -> str | None:
    value = request.metadata.get(PERSONA_KEY)
    return value if isinstance(value, str) else None


def set_routed_agent(request: ChatRequest, agent_name: str) -> None:
    request.metadata[ROUTED_AGENT_KEY] = agent_name


def get_routed_agent(request: ChatRequest) -> str | None:
    value = request.metadata.get(ROUTED_AGENT_KEY)
    return value if isinstance(value, str) else None


def set_previous_result(request: ChatRequest, result: Any) -> None:
    request.metadata[PREVIOUS_RESULT_KEY] = result


def get_previous_result(request: ChatRequest) -> Any | None:
    """Get the opaque result left by an earlier stage."""
    return request.metadata.get(PREVIOUS_RESULT_KEY)
