"""User-intent triage: a ready-made category set, agents and wiring.

``add_triage_agent_system`` registers four intent agents, an LLM classifier
for ``UserIntent`` and a scoped ``TriageAgent`` that routes between them:

    HelpRequest   -> help-agent
    DataQuery     -> data-query-agent
    ActionRequest -> action-agent
    Feedback      -> feedback-agent
    Unknown       -> (fallback agent, help-agent by default)
"""

from enum import Enum
from typing import Any

from chatwidgets.application.agents.base import Agent, Classifier
from chatwidgets.application.agents.classifiers import LLMClassifier
from chatwidgets.application.agents.context import get_classification, get_routed_agent, get_user_message
from chatwidgets.application.agents.registry import AgentRegistry, register_agent
from chatwidgets.application.agents.request import CancellationToken, ChatRequest
from chatwidgets.application.agents.triage import TriageAgent
from chatwidgets.config import Settings, get_settings
from chatwidgets.core.di import Lifetime, ServiceCollection, ServiceProvider
from chatwidgets.domain.entities.chat import ChatRole, ChatTurn
from chatwidgets.domain.outcome import Outcome
from chatwidgets.domain.protocols.providers import LLMProvider
from chatwidgets.infrastructure.providers.llm import GroqProvider


class UserIntent(str, Enum):
    """What the user wants from this turn."""

    HELP_REQUEST = "HelpRequest"
    DATA_QUERY = "DataQuery"
    ACTION_REQUEST = "ActionRequest"
    FEEDBACK = "Feedback"
    UNKNOWN = "Unknown"


INTENT_DESCRIPTIONS: dict[UserIntent, str] = {
    UserIntent.HELP_REQUEST: "User is asking for help, assistance, support, or troubleshooting",
    UserIntent.DATA_QUERY: "User is asking for data, information, facts, statistics, or knowledge",
    UserIntent.ACTION_REQUEST: "User wants something done, executed, created, modified, or deleted",
    UserIntent.FEEDBACK: "User is providing feedback, suggestions, complaints, or compliments",
}

HELP_AGENT = "help-agent"
DATA_QUERY_AGENT = "data-query-agent"
ACTION_AGENT = "action-agent"
FEEDBACK_AGENT = "feedback-agent"

INTENT_ROUTES: dict[UserIntent, str] = {
    UserIntent.HELP_REQUEST: HELP_AGENT,
    UserIntent.DATA_QUERY: DATA_QUERY_AGENT,
    UserIntent.ACTION_REQUEST: ACTION_AGENT,
    UserIntent.FEEDBACK: FEEDBACK_AGENT,
}


def route_user_intent(intent: UserIntent) -> str | None:
    """Agent name for ``intent``; None for Unknown."""
    return INTENT_ROUTES.get(intent)


def _button(label: str, action: str) -> dict[str, Any]:
    return {"type": "button", "label": label, "action": action}


class _IntentAgent(Agent):
    """Replies with a canned message that echoes the routed request."""

    reply_template: str = ""
    widgets: tuple[dict[str, Any], ...] = ()

    async def invoke(
        self,
        request: ChatRequest,
        cancel_token: CancellationToken | None = None,
    ) -> Outcome[ChatTurn]:
        user_message = get_user_message(request)
        intent = get_classification(request, UserIntent)
        intent_label = intent.value if intent is not None else UserIntent.UNKNOWN.value

        return Outcome.ok(
            ChatTurn(
                role=ChatRole.ASSISTANT,
                content=self.reply_template.format(message=user_message, intent=intent_label),
                widgets=self.widgets,
                thread_id=request.thread_id or "unknown",
                metadata={
                    "classification": intent_label,
                    "routedAgent": get_routed_agent(request),
                },
            )
        )


class HelpAgent(_IntentAgent):
    reply_template = (
        "I'm here to help! You asked: '{message}' (classified as {intent}). "
        "Please let me know what specific assistance you need."
    )


class DataQueryAgent(_IntentAgent):
    reply_template = (
        "I found your data query: '{message}' (classified as {intent}). "
        "Here's the information you requested..."
    )


class ActionAgent(_IntentAgent):
    reply_template = (
        "I'm processing your action request: '{message}' (classified as {intent}). "
        "Please confirm to proceed with this action."
    )
    widgets = (
        _button("Confirm", "confirm_action"),
        _button("Cancel", "cancel_action"),
    )


class FeedbackAgent(_IntentAgent):
    reply_template = (
        "Thank you for your feedback: '{message}' (classified as {intent}). "
        "We appreciate your input and will use it to improve our service."
    )
    widgets = (_button("Submit Feedback", "submit_feedback"),)


def add_triage_agent_system(
    services: ServiceCollection,
    settings: Settings | None = None,
    as_default_agent: bool = False,
) -> ServiceCollection:
    """Register the intent agents, classifier and triage agent.

    The triage agent is registered under ``TriageAgent``, where
    ``TriageMiddleware`` picks it up; pass ``as_default_agent=True`` to also
    make it the default ``Agent``. An ``LLMProvider`` already registered on
    ``services`` is reused; otherwise a ``GroqProvider`` singleton is added.
    The classifier is keyed by ``UserIntent`` so other triage systems can
    register their own ``Classifier`` alongside it.
    """
    settings = settings or get_settings()
    lifetime = settings.default_agent_lifetime

    services.try_add(LLMProvider, lambda _provider: GroqProvider(settings), Lifetime.SINGLETON)

    def build_classifier(provider: ServiceProvider) -> LLMClassifier[UserIntent]:
        return LLMClassifier(
            provider.get_required(LLMProvider),
            UserIntent,
            UserIntent.UNKNOWN,
            descriptions=INTENT_DESCRIPTIONS,
            model=settings.default_llm_model,
            temperature=settings.classifier_temperature,
            max_tokens=settings.classifier_max_tokens,
        )

    services.add(Classifier, build_classifier, Lifetime.SCOPED, key=UserIntent.__name__)

    register_agent(services, HELP_AGENT, HelpAgent, lifetime)
    register_agent(services, DATA_QUERY_AGENT, DataQueryAgent, lifetime)
    register_agent(services, ACTION_AGENT, ActionAgent, lifetime)
    register_agent(services, FEEDBACK_AGENT, FeedbackAgent, lifetime)

    def build_triage_agent(provider: ServiceProvider) -> TriageAgent[UserIntent]:
        return TriageAgent(
            classifier=provider.get_required(Classifier, UserIntent.__name__),
            registry=provider.get_required(AgentRegistry),
            routing_mapping=route_user_intent,
            fallback_agent_name=settings.triage_fallback_agent,
        )

    services.add(TriageAgent, build_triage_agent, Lifetime.SCOPED)
    if as_default_agent:
        services.add(Agent, lambda provider: provider.get_required(TriageAgent), Lifetime.SCOPED)
    return services
