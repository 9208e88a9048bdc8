"""Agent middleware for cross-cutting concerns.

Each class is constructed per invocation by the pipeline, with constructor
parameters resolved from the request's service scope.
"""

import asyncio
import time

from chatwidgets.application.agents.base import AgentDelegate, AgentMiddleware
from chatwidgets.application.agents.context import get_routed_agent
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.application.agents.triage import TriageAgent
from chatwidgets.domain.entities.chat import ChatTurn
from chatwidgets.domain.outcome import Outcome
from chatwidgets.infrastructure.telemetry import get_logger, record_agent_invocation

logger = get_logger(__name__)

DIRECT_AGENT_LABEL = "direct"


class TriageMiddleware(AgentMiddleware):
    """Hands every request to the triage agent.

    Terminal by nature: the rest of the pipeline is never called.
    """

    def __init__(self, triage_agent: TriageAgent):
        self._triage_agent = triage_agent

    async def invoke(
        self,
        request: ChatRequest,
        call_next: AgentDelegate,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        return await self._triage_agent.invoke(request, cancel_token)


class LoggingMiddleware(AgentMiddleware):
    """Logs start, completion and failure of each pipeline pass."""

    async def invoke(
        self,
        request: ChatRequest,
        call_next: AgentDelegate,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        logger.info(
            "Agent request started",
            extra={"thread_id": request.thread_id, "metadata_keys": sorted(request.metadata)},
        )
        start_time = time.perf_counter()

        try:
            outcome = await call_next(request, cancel_token)
        except asyncio.CancelledError:
            logger.info("Agent request cancelled", extra={"thread_id": request.thread_id})
            raise
        except Exception as exc:
            logger.exception(
                "Agent request failed",
                extra={"thread_id": request.thread_id, "error_type": type(exc).__name__},
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if outcome.is_ok:
            logger.info(
                "Agent request completed",
                extra={"routed_agent": get_routed_agent(request), "duration_ms": duration_ms},
            )
        else:
            logger.warning(
                "Agent request returned error",
                extra={
                    "error_code": outcome.error.code,
                    "error_message": outcome.error.message,
                    "duration_ms": duration_ms,
                },
            )
        return outcome


class MetricsMiddleware(AgentMiddleware):
    """Records invocation counts and latency per routed agent."""

    async def invoke(
        self,
        request: ChatRequest,
        call_next: AgentDelegate,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        start_time = time.perf_counter()
        status = "exception"
        try:
            outcome = await call_next(request, cancel_token)
            status = "ok" if outcome.is_ok else "error"
            return outcome
        except asyncio.CancelledError:
            status = "cancelled"
            raise
        finally:
            record_agent_invocation(
                agent=get_routed_agent(request) or DIRECT_AGENT_LABEL,
                status=status,
                duration_seconds=time.perf_counter() - start_time,
            )
