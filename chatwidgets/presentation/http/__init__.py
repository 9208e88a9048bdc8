"""HTTP presentation layer - REST API routes."""

from chatwidgets.presentation.http.agent import router as agent_router
from chatwidgets.presentation.http.health import metrics_router
from chatwidgets.presentation.http.health import router as health_router

__all__ = ["agent_router", "health_router", "metrics_router"]
