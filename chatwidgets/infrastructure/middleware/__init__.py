"""HTTP middleware infrastructure."""

from chatwidgets.infrastructure.middleware.error_handler import error_response, register_error_handlers
from chatwidgets.infrastructure.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware", "error_response", "register_error_handlers"]
