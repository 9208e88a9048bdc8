"""Composable middleware pipeline around a terminal agent delegate."""

from collections.abc import Callable
from functools import reduce

from chatwidgets.application.agents.base import Agent, AgentDelegate, AgentMiddleware
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.core.di import ServiceCollection
from chatwidgets.domain.entities.chat import ChatTurn
from chatwidgets.domain.outcome import Outcome
from chatwidgets.infrastructure.telemetry import get_logger

logger = get_logger(__name__)

PipelineComponent = Callable[[AgentDelegate], AgentDelegate]


def _middleware_component(middleware_cls: type[AgentMiddleware]) -> PipelineComponent:
    def component(call_next: AgentDelegate) -> AgentDelegate:
        async def invoke(
            request: ChatRequest,
            cancel_token: CancellationToken | None = None,
        ) -> Outcome[ChatTurn]:
            # One middleware instance per invocation, built from the request's scope
            middleware = request.services.construct(middleware_cls)
            return await middleware.invoke(request, call_next, cancel_token)

        invoke.__qualname__ = f"{middleware_cls.__name__}.invoke"
        return invoke

    return component


class AgentPipelineBuilder:
    """Fluent builder for agent pipelines.

    Middleware runs in registration order on the way in and in reverse on the
    way out:

        builder.use(M1).use(M2).use(M3).build(terminal)
        # M1 -> M2 -> M3 -> terminal -> M3 -> M2 -> M1
    """

    def __init__(self) -> None:
        self._components: list[PipelineComponent] = []

    def use(self, middleware_cls: type[AgentMiddleware]) -> "AgentPipelineBuilder":
        """Append a middleware class, constructed per invocation."""
        self._components.append(_middleware_component(middleware_cls))
        return self

    def use_component(self, component: PipelineComponent) -> "AgentPipelineBuilder":
        """Append a raw ``(next) -> delegate`` wrapper."""
        self._components.append(component)
        return self

    def build(self, terminal: AgentDelegate) -> AgentDelegate:
        """Compose the registered components around ``terminal``.

        Can be called repeatedly; the component list is not modified.
        """
        components = tuple(self._components)
        return reduce(
            lambda call_next, component: component(call_next),
            reversed(components),
            terminal,
        )

    def __len__(self) -> int:
        return len(self._components)


async def _invoke_scoped_default_agent(
    request: ChatRequest,
    cancel_token: CancellationToken | None = None,
) -> Outcome[ChatTurn]:
    with request.services.create_scope() as scope:
        agent: Agent = scope.get_required(Agent)
        return await agent.invoke(request, cancel_token)


def add_agent_pipeline(
    services: ServiceCollection,
    configure: Callable[[AgentPipelineBuilder], None],
) -> ServiceCollection:
    """Register a singleton ``AgentDelegate`` built from ``configure``.

    The pipeline's terminal opens a new scope and invokes the default
    ``Agent`` registered in it.
    """
    builder = AgentPipelineBuilder()
    configure(builder)
    pipeline = builder.build(_invoke_scoped_default_agent)
    services.add_instance(AgentDelegate, pipeline)

    logger.debug("Registered agent pipeline", extra={"middleware_count": len(builder)})
    return services
