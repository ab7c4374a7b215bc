"""Middleware modules for the proxy."""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
