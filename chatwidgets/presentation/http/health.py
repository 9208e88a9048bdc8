"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel

from chatwidgets.application.agents.registry import AgentRegistry
from chatwidgets.config import Settings

router = APIRouter()
metrics_router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    environment: str
    agents: list[str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report service status and the registered agent names."""
    settings: Settings = request.app.state.settings

    agents: list[str] = []
    with request.app.state.services.create_scope() as scope:
        registry: AgentRegistry | None = scope.get(AgentRegistry)
        if registry is not None:
            agents = sorted(registry.list_names())

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.version,
        environment=settings.environment,
        agents=agents,
    )


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
