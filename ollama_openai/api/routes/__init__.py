"""API routes for the proxy."""

from .chat import SSE_HEADERS, chat_completions
from .completions import completions
from .health import health
from .models import list_models

__all__ = [
    "SSE_HEADERS",
    "chat_completions",
    "completions",
    "health",
    "list_models",
]
