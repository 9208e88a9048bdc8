"""Typed error hierarchy for chatwidgets.

All application errors inherit from AppError and provide:
- code: Machine-readable error code
- message: Human-readable description
- details: Additional context as dict
- retryable: Whether the operation can be retried

Agent invocations do not raise these for expected failures; they return an
``Outcome`` carrying one of the ``TriageErrorCode`` codes instead.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error with full context."""

    code: str = "APP_ERROR"
    message: str = "An unexpected error occurred"
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for API responses and logging."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }


# --- Not Found Errors ---


@dataclass
class NotFoundError(AppError):
    """Resource not found."""

    code: str = "NOT_FOUND"
    retryable: bool = False


@dataclass
class ThreadNotFoundError(NotFoundError):
    """Conversation thread not found."""

    code: str = "THREAD_NOT_FOUND"
    thread_id: str = ""


# --- Validation Errors ---


@dataclass
class ValidationError(AppError):
    """Input validation failed."""

    code: str = "VALIDATION_ERROR"
    retryable: bool = False


@dataclass
class InvalidAgentNameError(ValidationError, ValueError):
    """Agent registered with an empty or whitespace-only name."""

    code: str = "INVALID_AGENT_NAME"


@dataclass
class OutcomeAccessError(AppError):
    """Value read from a failed outcome, or error read from a successful one."""

    code: str = "OUTCOME_ACCESS_ERROR"


# --- Configuration Errors ---


@dataclass
class ServiceNotRegisteredError(AppError):
    """No descriptor registered for a requested service."""

    code: str = "SERVICE_NOT_REGISTERED"
    service: str = ""


# --- Provider Errors ---


@dataclass
class ProviderError(AppError):
    """External provider failed."""

    code: str = "PROVIDER_ERROR"
    provider: str = ""
    operation: str = ""


@dataclass
class ProviderTimeoutError(ProviderError):
    """Provider call timed out."""

    code: str = "PROVIDER_TIMEOUT"
    retryable: bool = True


@dataclass
class ProviderRateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    code: str = "PROVIDER_RATE_LIMITED"
    retryable: bool = True
    retry_after_seconds: int = 60


@dataclass
class ProviderUnavailableError(ProviderError):
    """Provider is unavailable."""

    code: str = "PROVIDER_UNAVAILABLE"
    retryable: bool = True


# --- Outcome error codes ---


class TriageErrorCode:
    """Error codes carried by failed triage outcomes."""

    NO_MESSAGE = "NoMessage"
    NO_AGENT = "NoAgent"
    TRIAGE_FAILED = "TriageFailed"
