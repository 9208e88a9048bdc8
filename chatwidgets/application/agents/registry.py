"""Name-keyed agent registry backed by the service container.

Registration happens at startup through ``register_agent``, which records the
name and adds a keyed ``Agent`` descriptor. ``AgentRegistry`` only looks names
up; the container builds instances lazily and applies the lifetime policy.

Usage:
    services = ServiceCollection()
    register_agent(services, "help-agent", HelpAgent)
    register_agent(services, "stats-agent", StatsAgent, Lifetime.SINGLETON)

    with services.build_provider().create_scope() as scope:
        registry = scope.get_required(AgentRegistry)
        agent = registry.resolve("help-agent")
"""

from dataclasses import dataclass, field

from chatwidgets.application.agents.base import Agent
from chatwidgets.core.di import CapabilityResolver, Lifetime, ServiceCollection
from chatwidgets.domain.errors import InvalidAgentNameError
from chatwidgets.infrastructure.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class AgentRegistryOptions:
    """Names of every registered agent, written at startup only."""

    registered_agent_names: set[str] = field(default_factory=set)


def register_agent(
    services: ServiceCollection,
    name: str,
    agent_cls: type[Agent],
    lifetime: Lifetime = Lifetime.SCOPED,
) -> ServiceCollection:
    """Register ``agent_cls`` under ``name``.

    Registering a name again replaces the earlier implementation.

    Args:
        services: Collection to register into
        name: Routing name; must not be empty or whitespace
        agent_cls: Agent class, constructed through the container
        lifetime: Instance reuse policy (scoped by default)

    Raises:
        InvalidAgentNameError: If ``name`` is empty or whitespace
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidAgentNameError(
            message="Agent name cannot be empty or whitespace",
            details={"name": name, "agent_class": agent_cls.__name__},
        )

    services.configure(
        AgentRegistryOptions,
        lambda options: options.registered_agent_names.add(name),
    )
    services.add(Agent, agent_cls, lifetime, key=name)
    services.try_add(AgentRegistry, AgentRegistry, Lifetime.SCOPED)

    logger.debug(
        "Registered agent",
        extra={"agent_name": name, "agent_class": agent_cls.__name__, "lifetime": Lifetime(lifetime).value},
    )
    return services


class AgentRegistry:
    """Looks up registered agents by name."""

    def __init__(self, services: CapabilityResolver, options: AgentRegistryOptions):
        self._services = services
        self._options = options

    def resolve(self, name: str) -> Agent | None:
        """Get the agent registered under ``name``, or None if there is none."""
        if not name:
            return None
        return self._services.resolve_named(Agent, name)

    def has(self, name: str) -> bool:
        return name in self._options.registered_agent_names

    def list_names(self) -> frozenset[str]:
        """Every registered name, whether or not it has been resolved yet."""
        return frozenset(self._options.registered_agent_names)
