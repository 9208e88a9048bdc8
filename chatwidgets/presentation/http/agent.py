"""Agent and thread API endpoints."""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from chatwidgets.application.agents.base import Agent, AgentDelegate
from chatwidgets.application.agents.context import set_persona, set_user_message
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.core.di import ServiceProvider, ServiceScope
from chatwidgets.domain.entities.chat import ChatRole, ChatTurn
from chatwidgets.domain.errors import ThreadNotFoundError
from chatwidgets.domain.outcome import Outcome, OutcomeError
from chatwidgets.domain.protocols.threads import ThreadPersonaStore, ThreadService
from chatwidgets.infrastructure.middleware import error_response
from chatwidgets.infrastructure.telemetry import get_logger, set_request_context

logger = get_logger(__name__)
router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.1


class AgentRequestBody(BaseModel):
    """Agent request. Unknown fields are kept and passed on as metadata."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    thread_id: str | None = Field(default=None, alias="threadId")
    message: str | None = None


class ChatTurnResponse(BaseModel):
    """A chat turn as returned to the client."""

    model_config = ConfigDict(populate_by_name=True)

    role: str
    content: str
    widgets: list[dict[str, Any]] = Field(default_factory=list)
    thread_id: str | None = Field(default=None, alias="threadId")
    metadata: dict[str, Any] = Field(default_factory=dict)


class PersonaBody(BaseModel):
    """Persona override for a thread."""

    persona: str = Field(..., min_length=1, max_length=2000)


class ThreadResponse(BaseModel):
    """All turns of one thread."""

    model_config = ConfigDict(populate_by_name=True)

    thread_id: str = Field(alias="threadId")
    turns: list[ChatTurnResponse]


def get_service_provider(request: Request) -> ServiceProvider:
    """Root service provider built at app startup."""
    return request.app.state.services


def _turn_response(turn: ChatTurn) -> ChatTurnResponse:
    return ChatTurnResponse.model_validate(turn.to_dict())


def _ensure_thread(threads: ThreadService, thread_id: str | None) -> str:
    if thread_id is None or not threads.thread_exists(thread_id):
        return threads.create_thread()
    return thread_id


async def _invoke_default_agent(
    scope: ServiceScope,
    chat_request: ChatRequest,
    cancel_token: CancellationToken,
) -> Outcome[ChatTurn]:
    agent: Agent | None = scope.get(Agent)
    if agent is not None:
        return await agent.invoke(chat_request, cancel_token)

    pipeline: AgentDelegate = scope.get_required(AgentDelegate)
    return await pipeline(chat_request, cancel_token)


@contextlib.asynccontextmanager
async def cancel_on_disconnect(request: Request) -> AsyncIterator[CancellationToken]:
    """Yield a token that is cancelled if the client disconnects inside the block."""
    token = CancellationToken()

    async def watch() -> None:
        while not token.cancelled:
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling agent request")
                token.cancel("client disconnected")
                return
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)

    watcher = asyncio.create_task(watch())
    try:
        yield token
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher


@router.post("/agent", response_model=ChatTurnResponse, response_model_by_alias=True)
async def handle_agent_request(
    body: AgentRequestBody,
    http_request: Request,
    services: ServiceProvider = Depends(get_service_provider),
) -> ChatTurnResponse | JSONResponse:
    """Run one user turn through the registered agent.

    Every body field is copied into the request metadata. When a thread
    store is registered, unknown or missing thread ids get a fresh thread and
    both turns are appended to it. A client disconnect cancels the agent
    call through its cancellation token.
    """
    metadata: dict[str, Any] = body.model_dump(by_alias=True, exclude_none=True)

    with services.create_scope() as scope:
        threads: ThreadService | None = scope.get(ThreadService)
        thread_id = _ensure_thread(threads, body.thread_id) if threads is not None else body.thread_id
        if thread_id is not None:
            set_request_context(thread_id=thread_id)

        chat_request = ChatRequest(thread_id=thread_id, services=scope, metadata=metadata)
        has_message = body.message is not None and bool(body.message.strip())
        if has_message:
            set_user_message(chat_request, body.message)

        personas: ThreadPersonaStore | None = scope.get(ThreadPersonaStore)
        if personas is not None and thread_id is not None:
            persona = personas.get_persona(thread_id)
            if persona is not None:
                set_persona(chat_request, persona)

        if threads is not None and has_message:
            threads.append_message(
                thread_id,
                ChatTurn(role=ChatRole.USER, content=body.message, thread_id=thread_id),
            )

        async with cancel_on_disconnect(http_request) as cancel_token:
            outcome = await _invoke_default_agent(scope, chat_request, cancel_token)

        if outcome.is_ok and threads is not None:
            threads.append_message(thread_id, outcome.value)

    return outcome.match(_turn_response, _outcome_error_response)


def _outcome_error_response(error: OutcomeError) -> JSONResponse:
    logger.warning(
        "Agent returned error outcome",
        extra={"error_code": error.code, "error_message": error.message},
    )
    return error_response(500, error.code, error.message)


@router.get("/threads/{thread_id}", response_model=ThreadResponse, response_model_by_alias=True)
async def get_thread(
    thread_id: str,
    services: ServiceProvider = Depends(get_service_provider),
) -> ThreadResponse:
    """Get the turns recorded for a thread."""
    threads: ThreadService = services.get_required(ThreadService)
    messages = threads.get_messages(thread_id)
    return ThreadResponse(
        thread_id=thread_id,
        turns=[_turn_response(turn) for turn in messages.turns],
    )


@router.delete("/threads/{thread_id}", status_code=204)
async def delete_thread(
    thread_id: str,
    services: ServiceProvider = Depends(get_service_provider),
) -> None:
    """Delete a thread and its persona override."""
    threads: ThreadService = services.get_required(ThreadService)
    if not threads.delete_thread(thread_id):
        raise ThreadNotFoundError(
            message=f"Thread with ID '{thread_id}' not found.",
            thread_id=thread_id,
        )

    personas: ThreadPersonaStore | None = services.get(ThreadPersonaStore)
    if personas is not None:
        personas.clear_persona(thread_id)


@router.put("/threads/{thread_id}/persona", status_code=204)
async def set_thread_persona(
    thread_id: str,
    body: PersonaBody,
    services: ServiceProvider = Depends(get_service_provider),
) -> None:
    """Set the persona passed to agents for this thread."""
    threads: ThreadService = services.get_required(ThreadService)
    if not threads.thread_exists(thread_id):
        raise ThreadNotFoundError(
            message=f"Thread with ID '{thread_id}' not found.",
            thread_id=thread_id,
        )
    personas: ThreadPersonaStore = services.get_required(ThreadPersonaStore)
    personas.set_persona(thread_id, body.persona)
