"""LLM-backed classifier for closed category enums."""

import asyncio
import time
from collections.abc import Mapping
from enum import Enum
from typing import Generic, TypeVar

from chatwidgets.application.agents.base import Classifier
from chatwidgets.application.agents.request import CancellationToken, raise_if_cancelled
from chatwidgets.domain.protocols.providers import LLMMessage, LLMProvider
from chatwidgets.infrastructure.telemetry import get_logger, record_llm_request

logger = get_logger(__name__)

C = TypeVar("C", bound=Enum)

PROMPT_TEMPLATE = """Classify the following user message into EXACTLY ONE of these categories.
Respond with ONLY the category name - nothing else.

Categories:
{categories}

If none of these categories fit, respond with: {unknown}

User message: {message}

Your response (category name only):"""


class LLMClassifier(Classifier[C], Generic[C]):
    """Asks an LLM to pick one member of ``category_type`` for a message.

    Falls back to ``unknown`` for blank input, unparsable answers and
    provider failures. Cancellation is not swallowed.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        category_type: type[C],
        unknown: C,
        descriptions: Mapping[C, str] | None = None,
        model: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 16,
    ):
        """Initialize the classifier.

        Args:
            llm_provider: Provider used for the completion call
            category_type: Enum whose members are the possible answers
            unknown: Member returned when no category fits
            descriptions: Optional one-line description per member for the prompt
            model: Model override; provider default when None
            temperature: Sampling temperature
            max_tokens: Completion token limit
        """
        self._llm = llm_provider
        self._category_type = category_type
        self._unknown = unknown
        self._descriptions = dict(descriptions or {})
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def unknown(self) -> C:
        return self._unknown

    def build_prompt(self, text: str) -> str:
        lines = []
        for member in self._category_type:
            if member is self._unknown:
                continue
            description = self._descriptions.get(member)
            label = _member_label(member)
            lines.append(f"- {label}: {description}" if description else f"- {label}")

        return PROMPT_TEMPLATE.format(
            categories="\n".join(lines),
            unknown=_member_label(self._unknown),
            message=text,
        )

    def parse(self, answer: str | None) -> C:
        """Map a raw model answer onto a member, ignoring case and punctuation."""
        if not isinstance(answer, str):
            return self._unknown
        cleaned = answer.strip().strip(".,;:!\"'`").strip().lower()
        if not cleaned:
            return self._unknown

        for member in self._category_type:
            if cleaned in (_member_label(member).lower(), member.name.lower()):
                return member
        return self._unknown

    async def classify(
        self,
        text: str,
        cancel_token: CancellationToken | None = None,
    ) -> C:
        if not text or not text.strip():
            return self._unknown

        raise_if_cancelled(cancel_token)

        model = self._model or "default"
        start_time = time.perf_counter()
        try:
            response = await self._llm.chat(
                [LLMMessage(role="user", content=self.build_prompt(text))],
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "Classification failed, using unknown category",
                extra={"error_type": type(exc).__name__, "error": str(exc)},
            )
            record_llm_request(
                provider=self._llm.provider_name,
                model=model,
                status="error",
                duration_seconds=time.perf_counter() - start_time,
            )
            return self._unknown

        record_llm_request(
            provider=self._llm.provider_name,
            model=response.model or model,
            status="success",
            duration_seconds=time.perf_counter() - start_time,
        )

        raise_if_cancelled(cancel_token)
        category = self.parse(response.content)
        logger.debug(
            "Classified message",
            extra={"category": _member_label(category), "raw_answer": response.content},
        )
        return category


def _member_label(member: Enum) -> str:
    return member.value if isinstance(member.value, str) else member.name
