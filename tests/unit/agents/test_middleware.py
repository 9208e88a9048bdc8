"""Tests for agent middleware."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from chatwidgets.application.agents.context import set_routed_agent
from chatwidgets.application.agents.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    TriageMiddleware,
)
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.application.agents.triage import TriageAgent
from chatwidgets.domain.entities.chat import ChatRole, ChatTurn
from chatwidgets.domain.outcome import Outcome

REPLY = Outcome.ok(ChatTurn(role=ChatRole.ASSISTANT, content="hi"))


@pytest.fixture
def request_(services) -> ChatRequest:
    return ChatRequest(thread_id="t-1", services=services.build_provider())


class TestTriageMiddleware:
    """Test TriageMiddleware."""

    @pytest.mark.asyncio
    async def test_delegates_to_triage_without_calling_next(self, request_):
        """Test the triage agent answers and next is never called."""
        triage = AsyncMock(spec=TriageAgent)
        triage.invoke.return_value = REPLY
        call_next = AsyncMock()
        token = CancellationToken()

        outcome = await TriageMiddleware(triage).invoke(request_, call_next, token)

        assert outcome is REPLY
        triage.invoke.assert_awaited_once_with(request_, token)
        call_next.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_constructed_from_container(self, services, request_):
        """Test the pipeline can build it with the registered triage agent."""
        triage = AsyncMock(spec=TriageAgent)
        services.add_instance(TriageAgent, triage)

        middleware = services.build_provider().construct(TriageMiddleware)

        assert middleware._triage_agent is triage


class TestLoggingMiddleware:
    """Test LoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_passes_outcome_through(self, request_):
        """Test outcomes are returned unchanged."""
        call_next = AsyncMock(return_value=REPLY)

        assert await LoggingMiddleware().invoke(request_, call_next) is REPLY
        call_next.assert_awaited_once_with(request_, None)

    @pytest.mark.asyncio
    async def test_error_outcome_passes_through(self, request_):
        """Test error outcomes are logged but not altered."""
        failed = Outcome.fail("NoAgent", "nobody home")
        call_next = AsyncMock(return_value=failed)

        assert await LoggingMiddleware().invoke(request_, call_next) is failed

    @pytest.mark.asyncio
    async def test_reraises_exceptions(self, request_):
        """Test exceptions from the rest of the pipeline propagate."""
        call_next = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await LoggingMiddleware().invoke(request_, call_next)

    @pytest.mark.asyncio
    async def test_reraises_cancellation(self, request_):
        """Test cancellation propagates."""
        call_next = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await LoggingMiddleware().invoke(request_, call_next)


class TestMetricsMiddleware:
    """Test MetricsMiddleware."""

    @pytest.mark.asyncio
    async def test_records_routed_agent_and_status(self, request_):
        """Test metrics use the routed agent set further down the chain."""

        async def call_next(request, cancel_token=None):
            set_routed_agent(request, "help-agent")
            return REPLY

        with patch("chatwidgets.application.agents.middleware.record_agent_invocation") as record:
            await MetricsMiddleware().invoke(request_, call_next)

        record.assert_called_once()
        assert record.call_args.kwargs["agent"] == "help-agent"
        assert record.call_args.kwargs["status"] == "ok"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("side_effect,expected_status,raised", [
        (None, "error", None),
        (RuntimeError("boom"), "exception", RuntimeError),
        (asyncio.CancelledError(), "cancelled", asyncio.CancelledError),
    ])
    async def test_status_labels(self, request_, side_effect, expected_status, raised):
        """Test each way a call can end gets its own status label."""
        call_next = AsyncMock(return_value=Outcome.fail("NoAgent", "x"), side_effect=side_effect)

        with patch("chatwidgets.application.agents.middleware.record_agent_invocation") as record:
            if raised is None:
                await MetricsMiddleware().invoke(request_, call_next)
            else:
                with pytest.raises(raised):
                    await MetricsMiddleware().invoke(request_, call_next)

        assert record.call_args.kwargs["agent"] == "direct"
        assert record.call_args.kwargs["status"] == expected_status
