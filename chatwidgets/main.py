"""FastAPI application factory."""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chatwidgets.application.agents.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    TriageMiddleware,
)
from chatwidgets.application.agents.pipeline import add_agent_pipeline
from chatwidgets.application.intents import add_triage_agent_system
from chatwidgets.config import Settings, get_settings
from chatwidgets.core.di import Lifetime, ServiceCollection, ServiceProvider
from chatwidgets.domain.protocols.providers import LLMProvider
from chatwidgets.domain.protocols.threads import ThreadPersonaStore, ThreadService
from chatwidgets.infrastructure.middleware import (
    RequestContextMiddleware,
    register_error_handlers,
)
from chatwidgets.infrastructure.storage import InMemoryPersonaStore, InMemoryThreadService
from chatwidgets.infrastructure.telemetry import configure_logging, get_logger
from chatwidgets.infrastructure.telemetry.metrics import set_service_info
from chatwidgets.presentation.http import agent_router, health_router, metrics_router

logger = get_logger(__name__)


def build_services(
    settings: Settings,
    configure_services: Callable[[ServiceCollection], None] | None = None,
) -> ServiceProvider:
    """Register the default agent system and freeze it into a root provider.

    ``configure_services`` runs first, so an ``LLMProvider`` or thread store it
    registers is used instead of the default one.
    """
    services = ServiceCollection()
    services.add_instance(Settings, settings)

    if configure_services is not None:
        configure_services(services)

    services.try_add(ThreadService, InMemoryThreadService, Lifetime.SINGLETON)
    services.try_add(ThreadPersonaStore, InMemoryPersonaStore, Lifetime.SINGLETON)

    add_triage_agent_system(services, settings)
    add_agent_pipeline(
        services,
        lambda pipeline: pipeline.use(LoggingMiddleware).use(MetricsMiddleware).use(TriageMiddleware),
    )

    return services.build_provider()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    services: ServiceProvider = app.state.services

    logger.info(
        "Starting chatwidgets",
        extra={
            "version": settings.version,
            "environment": settings.environment,
            "route_prefix": settings.route_prefix,
        },
    )

    yield

    logger.info("Shutting down chatwidgets")
    llm_provider = services.get(LLMProvider)
    close = getattr(llm_provider, "close", None)
    if close is not None:
        await close()


def create_app(
    settings: Settings | None = None,
    configure_services: Callable[[ServiceCollection], None] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing
        configure_services: Optional hook to register services before the defaults

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    configure_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        service_name=settings.service_name,
    )

    set_service_info(
        version=settings.version,
        environment=settings.environment,
    )

    app = FastAPI(
        title="Chat Widgets Agent API",
        description="Routes chat turns through triage and named agents",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.settings = settings
    app.state.services = build_services(settings, configure_services)

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["Health"])
    if settings.prometheus_enabled:
        app.include_router(metrics_router, tags=["Metrics"])
    app.include_router(agent_router, prefix=settings.route_prefix, tags=["Agents"])

    return app
