"""HTTP API: FastAPI application and path-based routing."""

from .app import build_backends, create_app, error_response
from .dispatcher import RouteDispatcher, choose_backend

__all__ = [
    "RouteDispatcher",
    "build_backends",
    "choose_backend",
    "create_app",
    "error_response",
]
