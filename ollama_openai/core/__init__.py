"""Core module initialization."""

from .backend import (
    CHAT_PATH,
    GENERATE_PATH,
    TAGS_PATH,
    OllamaClient,
    OllamaStream,
    format_httpx_error,
)
from .exceptions import (
    AuthenticationError,
    BackendError,
    ConfigurationError,
    InvalidRequestError,
    ProxyError,
    UnsupportedPromptError,
)
from .sse import SSE_DONE, encode_sse_data, iter_sse_data, parse_ndjson_line
from .streaming import StreamPump

__all__ = [
    "AuthenticationError",
    "BackendError",
    "CHAT_PATH",
    "ConfigurationError",
    "GENERATE_PATH",
    "InvalidRequestError",
    "OllamaClient",
    "OllamaStream",
    "ProxyError",
    "SSE_DONE",
    "StreamPump",
    "TAGS_PATH",
    "UnsupportedPromptError",
    "encode_sse_data",
    "format_httpx_error",
    "iter_sse_data",
    "parse_ndjson_line",
]
