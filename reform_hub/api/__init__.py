"""reformHub API layer: routes, schemas, WebSocket, and middleware."""

from reform_hub.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from reform_hub.api.routes import health_router, router
from reform_hub.api.schemas import ErrorResponse, HealthResponse, SearchResponse
from reform_hub.api.websocket import websocket_search

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "health_router",
    "router",
    "websocket_search",
    "ErrorResponse",
    "HealthResponse",
    "SearchResponse",
]
