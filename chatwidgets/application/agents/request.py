"""Per-call request envelope and cooperative cancellation."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from chatwidgets.core.di import CapabilityResolver


class CancellationToken:
    """Caller-owned cancellation signal checked at every suspension point.

    Cancelling the token makes the next ``raise_if_cancelled`` raise
    ``asyncio.CancelledError``, the same error asyncio raises when the task
    itself is cancelled, so callers handle both the same way.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        self._cancelled = True
        self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError(self._reason)


def raise_if_cancelled(cancel_token: CancellationToken | None) -> None:
    """Raise ``asyncio.CancelledError`` if ``cancel_token`` has been cancelled."""
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()


@dataclass(frozen=True, eq=False)
class ChatRequest:
    """One chat turn flowing through the agent pipeline.

    The envelope is immutable; ``metadata`` is the mutable channel stages use
    to hand data to each other. It is created empty per request and never
    shared or persisted.
    """

    thread_id: str | None
    services: CapabilityResolver
    metadata: dict[str, Any] = field(default_factory=dict)
