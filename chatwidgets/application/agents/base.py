"""Agent, middleware and classifier contracts.

Agents are the units a chat turn is routed to. They:
- Receive a ChatRequest (thread id, services, metadata channel)
- Return an Outcome: a ChatTurn on success, an (code, message) error otherwise
- Let cancellation escape as ``asyncio.CancelledError``, never as an Outcome

Middleware wraps the next delegate in the chain and may run logic before and
after it, or answer without calling it at all.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from enum import Enum
from typing import Generic, Protocol, TypeVar

from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.domain.entities.chat import ChatTurn
from chatwidgets.domain.outcome import Outcome

C = TypeVar("C", bound=Enum)


class AgentDelegate(Protocol):
    """Callable form of an agent; what pipeline stages wrap."""

    def __call__(
        self,
        request: ChatRequest,
        cancel_token: CancellationToken | None = None,
    ) -> Awaitable[Outcome[ChatTurn]]:
        ...


class Agent(ABC):
    """A handler that turns a chat request into a reply."""

    @abstractmethod
    async def invoke(
        self,
        request: ChatRequest,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        """Handle the request.

        Args:
            request: The chat request; handlers may write to ``request.metadata``
            cancel_token: Optional caller cancellation signal

        Returns:
            Outcome wrapping the reply turn, or an error code and message

        Raises:
            asyncio.CancelledError: If the call was cancelled
        """
        ...


class AgentMiddleware(ABC):
    """A stage wrapped around the rest of the pipeline."""

    @abstractmethod
    async def invoke(
        self,
        request: ChatRequest,
        call_next: AgentDelegate,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        ...


class Classifier(ABC, Generic[C]):
    """Maps free text onto a closed set of categories."""

    @abstractmethod
    async def classify(
        self,
        text: str,
        cancel_token: CancellationToken | None = None,
    ) -> C:
        """Return the best category for ``text``.

        Implementations return their designated unknown member rather than
        raising when they cannot decide.
        """
        ...
