"""Structured logging with context injection.

Correlation fields (request id, thread id, routed agent) live in context
variables, so every log line emitted while handling a request carries them
without being passed around explicitly.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
thread_id_var: ContextVar[str | None] = ContextVar("thread_id", default=None)
routed_agent_var: ContextVar[str | None] = ContextVar("routed_agent", default=None)

# (field name, variable, text label, text width)
_CONTEXT_FIELDS: tuple[tuple[str, ContextVar[str | None], str, int | None], ...] = (
    ("request_id", request_id_var, "req", 8),
    ("thread_id", thread_id_var, "thread", 8),
    ("routed_agent", routed_agent_var, "agent", None),
)

_service_name: str = "chatwidgets"


def set_request_context(
    request_id: str | None = None,
    thread_id: str | None = None,
    routed_agent: str | None = None,
) -> None:
    """Set context variables for request correlation. None leaves a field as is."""
    values = {"request_id": request_id, "thread_id": thread_id, "routed_agent": routed_agent}
    for field_name, var, _, _ in _CONTEXT_FIELDS:
        if values[field_name] is not None:
            var.set(values[field_name])


def clear_request_context() -> None:
    """Clear all context variables."""
    for _, var, _, _ in _CONTEXT_FIELDS:
        var.set(None)


def current_context() -> dict[str, str]:
    """Correlation fields set for the current task."""
    return {
        field_name: value
        for field_name, var, _, _ in _CONTEXT_FIELDS
        if (value := var.get())
    }


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    extra = getattr(record, "extra", None)
    return extra if isinstance(extra, dict) else {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "service": _service_name,
            "logger": record.name,
            "message": record.getMessage(),
            **current_context(),
        }

        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)

        log_data.update(_record_extra(record))

        return json.dumps(
            {k: v for k, v in log_data.items() if v is not None},
            default=str,
        )


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")

        context_parts = []
        for _, var, label, width in _CONTEXT_FIELDS:
            if value := var.get():
                context_parts.append(f"{label}={value[:width] if width else value}")
        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        line = f"{timestamp} | {record.levelname:8} | {record.name}{context_str} | {record.getMessage()}"

        if extra := _record_extra(record):
            line += " | " + " ".join(f"{k}={v}" for k, v in extra.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that collects bound and per-call fields on ``record.extra``."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = dict(self.extra) if self.extra else {}
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    service_name: str = "chatwidgets",
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_type: Output format ('json' or 'text')
        service_name: Service name for log identification
    """
    global _service_name
    _service_name = service_name

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if format_type == "json" else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Get a logger whose records carry ``extra`` in addition to per-call fields."""
    return ContextLogger(logging.getLogger(name), extra)
