"""Agent contracts, pipeline composition, registry and triage routing."""

from chatwidgets.application.agents.base import (
    Agent,
    AgentDelegate,
    AgentMiddleware,
    Classifier,
)
from chatwidgets.application.agents.classifiers import LLMClassifier
from chatwidgets.application.agents.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    TriageMiddleware,
)
from chatwidgets.application.agents.pipeline import AgentPipelineBuilder, add_agent_pipeline
from chatwidgets.application.agents.registry import (
    AgentRegistry,
    AgentRegistryOptions,
    register_agent,
)
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.application.agents.triage import TriageAgent

__all__ = [
    # Contracts
    "Agent",
    "AgentDelegate",
    "AgentMiddleware",
    "Classifier",
    # Request
    "ChatRequest",
    "CancellationToken",
    # Pipeline
    "AgentPipelineBuilder",
    "add_agent_pipeline",
    "TriageMiddleware",
    "LoggingMiddleware",
    "MetricsMiddleware",
    # Registry
    "AgentRegistry",
    "AgentRegistryOptions",
    "register_agent",
    # Routing
    "TriageAgent",
    "LLMClassifier",
]
