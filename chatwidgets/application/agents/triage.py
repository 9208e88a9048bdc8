"""TriageAgent - classifies a user message and routes it to a named agent.

One pass, no retries:
1. Read the user message from the request metadata
2. Classify it into a category
3. Record the classification and message for downstream agents
4. Map the category to an agent name and resolve it from the registry,
   falling back to the fallback name, then to the fallback instance
5. Invoke the target and return its outcome unchanged
"""

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

from chatwidgets.application.agents.base import Agent, Classifier
from chatwidgets.application.agents.context import (
    get_user_message,
    set_classification,
    set_routed_agent,
    set_user_message,
)
from chatwidgets.application.agents.registry import AgentRegistry
from chatwidgets.application.agents.request import (
    CancellationToken,
    ChatRequest,
    raise_if_cancelled,
)
from chatwidgets.domain.entities.chat import ChatTurn
from chatwidgets.domain.errors import TriageErrorCode
from chatwidgets.domain.outcome import Outcome
from chatwidgets.infrastructure.telemetry import (
    get_logger,
    record_triage_failure,
    record_triage_route,
    set_request_context,
)

logger = get_logger(__name__)

C = TypeVar("C", bound=Enum)

UNKNOWN_AGENT_NAME = "unknown"

RoutingMapping = Callable[[C], str | None]


class TriageAgent(Agent, Generic[C]):
    """Routes each request to the agent registered for its category."""

    def __init__(
        self,
        classifier: Classifier[C],
        registry: AgentRegistry,
        routing_mapping: RoutingMapping,
        fallback_agent_name: str | None = None,
        fallback_agent: Agent | None = None,
    ):
        """Initialize the triage agent.

        Args:
            classifier: Classifies the user message into a category
            registry: Registry the target agents are resolved from
            routing_mapping: Maps a category to an agent name, or None
            fallback_agent_name: Registered agent used when the mapping yields nothing
            fallback_agent: Instance used when no registered agent can be resolved
        """
        self._classifier = classifier
        self._registry = registry
        self._routing_mapping = routing_mapping
        self._fallback_agent_name = fallback_agent_name
        self._fallback_agent = fallback_agent

    async def invoke(
        self,
        request: ChatRequest,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        try:
            user_message = get_user_message(request)
            if user_message is None or not user_message.strip():
                record_triage_failure(TriageErrorCode.NO_MESSAGE)
                return Outcome.fail(
                    TriageErrorCode.NO_MESSAGE,
                    "No user message found in request context",
                )

            raise_if_cancelled(cancel_token)
            category = await self._classifier.classify(user_message, cancel_token)

            set_classification(request, category)
            set_user_message(request, user_message)

            agent_name = self._routing_mapping(category)
            routed_name, target = self._resolve_target(agent_name)

            if target is None:
                logger.warning(
                    "No agent available for category",
                    extra={"category": _category_label(category), "mapped_agent": agent_name},
                )
                record_triage_failure(TriageErrorCode.NO_AGENT)
                return Outcome.fail(
                    TriageErrorCode.NO_AGENT,
                    f"No agent found for routing key: {agent_name}",
                )

            routed_name = routed_name or UNKNOWN_AGENT_NAME
            set_routed_agent(request, routed_name)
            set_request_context(routed_agent=routed_name)
            record_triage_route(_category_label(category), routed_name)

            logger.info(
                "Routing request",
                extra={"category": _category_label(category), "routed_agent": routed_name},
            )

            raise_if_cancelled(cancel_token)
            return await target.invoke(request, cancel_token)

        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Triage routing failed", extra={"error_type": type(exc).__name__})
            record_triage_failure(TriageErrorCode.TRIAGE_FAILED)
            return Outcome.fail(
                TriageErrorCode.TRIAGE_FAILED,
                f"Triage routing failed: {exc}",
            )

    def _resolve_target(self, agent_name: str | None) -> tuple[str | None, Agent | None]:
        """Walk the fallback chain: mapped name, fallback name, fallback instance."""
        for candidate in (agent_name, self._fallback_agent_name):
            if candidate and self._registry.has(candidate):
                agent = self._registry.resolve(candidate)
                if agent is not None:
                    return candidate, agent

        if self._fallback_agent is not None:
            return None, self._fallback_agent

        return None, None


def _category_label(category: Enum) -> str:
    return str(category.value) if isinstance(category.value, str) else category.name
