"""Telemetry infrastructure (logging, metrics)."""

from chatwidgets.infrastructure.telemetry.logging import (
    ContextLogger,
    clear_request_context,
    configure_logging,
    current_context,
    get_logger,
    request_id_var,
    routed_agent_var,
    set_request_context,
    thread_id_var,
)
from chatwidgets.infrastructure.telemetry.metrics import (
    record_agent_invocation,
    record_llm_request,
    record_triage_failure,
    record_triage_route,
    set_service_info,
)

__all__ = [
    # Logging
    "ContextLogger",
    "configure_logging",
    "current_context",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "request_id_var",
    "thread_id_var",
    "routed_agent_var",
    # Metrics
    "set_service_info",
    "record_agent_invocation",
    "record_triage_route",
    "record_triage_failure",
    "record_llm_request",
]
