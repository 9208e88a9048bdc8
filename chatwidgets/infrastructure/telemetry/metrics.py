"""Prometheus metrics configuration."""

from prometheus_client import Counter, Histogram, Info

# Service info
SERVICE_INFO = Info("chatwidgets", "Chat widgets agent service information")

# Agent pipeline metrics
AGENT_INVOCATIONS_TOTAL = Counter(
    "chatwidgets_agent_invocations_total",
    "Total agent pipeline invocations",
    ["agent", "status"],  # status: ok, error, exception, cancelled
)

AGENT_INVOCATION_DURATION_SECONDS = Histogram(
    "chatwidgets_agent_invocation_duration_seconds",
    "Agent pipeline invocation latency in seconds",
    ["agent"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Triage metrics
TRIAGE_ROUTES_TOTAL = Counter(
    "chatwidgets_triage_routes_total",
    "Triage routing decisions",
    ["category", "agent"],
)

TRIAGE_FAILURES_TOTAL = Counter(
    "chatwidgets_triage_failures_total",
    "Triage invocations that ended in an error outcome",
    ["code"],
)

# LLM provider metrics
LLM_REQUESTS_TOTAL = Counter(
    "chatwidgets_llm_requests_total",
    "Total LLM provider requests",
    ["provider", "model", "status"],
)

LLM_REQUEST_DURATION_SECONDS = Histogram(
    "chatwidgets_llm_request_duration_seconds",
    "LLM request latency in seconds",
    ["provider", "model"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)


def set_service_info(version: str, environment: str) -> None:
    """Set service information.

    Args:
        version: Service version
        environment: Deployment environment
    """
    SERVICE_INFO.info({
        "version": version,
        "environment": environment,
    })


def record_agent_invocation(agent: str, status: str, duration_seconds: float) -> None:
    """Record one pass through the agent pipeline.

    Args:
        agent: Routed agent name, or "direct" when nothing was routed
        status: ok, error, exception or cancelled
        duration_seconds: Invocation duration in seconds
    """
    AGENT_INVOCATIONS_TOTAL.labels(agent=agent, status=status).inc()
    AGENT_INVOCATION_DURATION_SECONDS.labels(agent=agent).observe(duration_seconds)


def record_triage_route(category: str, agent: str) -> None:
    TRIAGE_ROUTES_TOTAL.labels(category=category, agent=agent).inc()


def record_triage_failure(code: str) -> None:
    TRIAGE_FAILURES_TOTAL.labels(code=code).inc()


def record_llm_request(
    provider: str,
    model: str,
    status: str,
    duration_seconds: float,
) -> None:
    """Record an LLM request.

    Args:
        provider: LLM provider name
        model: Model name
        status: Request status
        duration_seconds: Request duration in seconds
    """
    LLM_REQUESTS_TOTAL.labels(
        provider=provider,
        model=model,
        status=status,
    ).inc()
    LLM_REQUEST_DURATION_SECONDS.labels(
        provider=provider,
        model=model,
    ).observe(duration_seconds)
