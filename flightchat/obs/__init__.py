"""Observability package.

Request-scoped context, structured JSON logging, in-process metrics and the
ASGI middleware that ties them together for both HTTP services.
"""

__all__ = [
    "middleware",
    "metrics",
    "logger",
    "context",
]
