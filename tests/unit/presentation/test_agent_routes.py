"""Tests for the HTTP endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from chatwidgets.application.agents.base import Agent
from chatwidgets.application.agents.request import CancellationToken
from chatwidgets.core.di import Lifetime
from chatwidgets.domain.entities.chat import ChatRole, ChatTurn
from chatwidgets.domain.outcome import Outcome
from chatwidgets.domain.protocols.providers import LLMProvider, LLMResponse
from chatwidgets.main import create_app
from chatwidgets.presentation.http.agent import cancel_on_disconnect

PREFIX = "/api/chat"


@pytest.fixture
def client(settings, mock_llm_provider):
    app = create_app(
        settings,
        configure_services=lambda services: services.add_instance(LLMProvider, mock_llm_provider),
    )
    with TestClient(app) as test_client:
        yield test_client


def _answer(mock_llm_provider, content: str) -> None:
    mock_llm_provider.chat.return_value = LLMResponse(content=content, model="mock-model")


class TestAgentEndpoint:
    """Test POST /agent."""

    def test_help_request(self, client):
        """Test a message is classified, routed and returned as a chat turn."""
        response = client.post(f"{PREFIX}/agent", json={"message": "I need help with my account"})

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "assistant"
        assert "I need help with my account" in body["content"]
        assert body["widgets"] == []
        assert body["threadId"]
        assert body["metadata"] == {"classification": "HelpRequest", "routedAgent": "help-agent"}

    def test_widgets_in_response(self, client, mock_llm_provider):
        """Test widget descriptors are returned with the turn."""
        _answer(mock_llm_provider, "ActionRequest")

        response = client.post(f"{PREFIX}/agent", json={"message": "Cancel my order"})

        assert response.status_code == 200
        labels = [widget["label"] for widget in response.json()["widgets"]]
        assert labels == ["Confirm", "Cancel"]

    def test_missing_message_is_error_body(self, client, mock_llm_provider):
        """Test a request without a message returns the NoMessage error."""
        response = client.post(f"{PREFIX}/agent", json={"threadId": "t-unknown"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "NoMessage"
        assert error["message"] == "No user message found in request context"
        mock_llm_provider.chat.assert_not_awaited()

    def test_request_id_echoed(self, client):
        """Test the X-Request-ID header is passed back."""
        response = client.post(
            f"{PREFIX}/agent",
            json={"message": "hello"},
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"


class TestThreadEndpoints:
    """Test thread history and persona endpoints."""

    def test_turns_recorded_on_thread(self, client):
        """Test both the user and assistant turns are stored."""
        first = client.post(f"{PREFIX}/agent", json={"message": "help me"}).json()
        thread_id = first["threadId"]

        second = client.post(f"{PREFIX}/agent", json={"threadId": thread_id, "message": "again"})
        assert second.json()["threadId"] == thread_id

        response = client.get(f"{PREFIX}/threads/{thread_id}")

        assert response.status_code == 200
        turns = response.json()["turns"]
        assert [turn["role"] for turn in turns] == ["user", "assistant", "user", "assistant"]
        assert turns[2]["content"] == "again"

    def test_unknown_thread_is_404(self, client):
        """Test reading a missing thread returns the not-found error body."""
        response = client.get(f"{PREFIX}/threads/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "THREAD_NOT_FOUND"

    def test_delete_thread(self, client):
        """Test a thread can be deleted once."""
        thread_id = client.post(f"{PREFIX}/agent", json={"message": "hi"}).json()["threadId"]

        assert client.delete(f"{PREFIX}/threads/{thread_id}").status_code == 204
        assert client.delete(f"{PREFIX}/threads/{thread_id}").status_code == 404

    def test_persona_requires_thread(self, client):
        """Test setting a persona on a missing thread returns 404."""
        response = client.put(f"{PREFIX}/threads/missing/persona", json={"persona": "pirate"})

        assert response.status_code == 404

    def test_persona_set(self, client):
        """Test a persona can be set on an existing thread."""
        thread_id = client.post(f"{PREFIX}/agent", json={"message": "hi"}).json()["threadId"]

        response = client.put(f"{PREFIX}/threads/{thread_id}/persona", json={"persona": "pirate"})

        assert response.status_code == 204


class TestHealthEndpoints:
    """Test health and metrics endpoints."""

    def test_health_lists_agents(self, client, settings):
        """Test /health reports the registered agent names."""
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == settings.version
        assert body["agents"] == ["action-agent", "data-query-agent", "feedback-agent", "help-agent"]

    def test_live(self, client):
        """Test the liveness probe."""
        assert client.get("/live").json() == {"status": "alive"}

    def test_metrics(self, client):
        """Test Prometheus metrics are exposed."""
        client.post(f"{PREFIX}/agent", json={"message": "hi"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "chatwidgets_agent_invocations_total" in response.text


class TokenRecordingAgent(Agent):
    """Default agent that remembers the token it was invoked with."""

    tokens: list = []

    async def invoke(self, request, cancel_token=None):
        TokenRecordingAgent.tokens.append(cancel_token)
        return Outcome.ok(ChatTurn(role=ChatRole.ASSISTANT, content="ok", thread_id=request.thread_id))


class FakeHttpRequest:
    """Reports a disconnect after a number of polls."""

    def __init__(self, connected_polls: int):
        self.connected_polls = connected_polls

    async def is_disconnected(self) -> bool:
        if self.connected_polls <= 0:
            return True
        self.connected_polls -= 1
        return False


class TestCancellation:
    """Test client disconnects reach the agent's cancellation token."""

    def test_route_passes_token(self, settings, mock_llm_provider):
        """Test the default agent receives a live cancellation token."""
        TokenRecordingAgent.tokens = []

        def configure(services):
            services.add_instance(LLMProvider, mock_llm_provider)
            services.add(Agent, TokenRecordingAgent, Lifetime.SCOPED)

        with TestClient(create_app(settings, configure_services=configure)) as client:
            response = client.post(f"{PREFIX}/agent", json={"message": "hi"})

        assert response.status_code == 200
        token = TokenRecordingAgent.tokens[-1]
        assert isinstance(token, CancellationToken)
        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_disconnect_cancels_token(self):
        """Test the token is cancelled once the client goes away."""
        async with cancel_on_disconnect(FakeHttpRequest(connected_polls=1)) as token:
            with pytest.raises(asyncio.CancelledError):
                for _ in range(50):
                    token.raise_if_cancelled()
                    await asyncio.sleep(0.05)

        assert token.cancelled
        assert token.reason == "client disconnected"

    @pytest.mark.asyncio
    async def test_connected_client_keeps_token(self):
        """Test the token stays live while the client is connected."""
        async with cancel_on_disconnect(FakeHttpRequest(connected_polls=1000)) as token:
            await asyncio.sleep(0.05)

        assert not token.cancelled
