"""Testing utilities for in-process proxy simulations."""

from .assertions import (
    assert_chat_stream_valid,
    assert_error_envelope,
    assert_openai_chat_valid,
    parse_sse_body,
    sse_chunks,
    stream_text,
)
from .fake_ollama import (
    BackendResponse,
    FakeOllama,
    StreamError,
    build_chat_chunks,
    build_generate_chunks,
)
from .proxy_harness import DEFAULT_OLLAMA_URL, ProxyHarness

__all__ = [
    # Core simulation classes
    "BackendResponse",
    "FakeOllama",
    "ProxyHarness",
    "StreamError",
    "DEFAULT_OLLAMA_URL",
    # Builders
    "build_chat_chunks",
    "build_generate_chunks",
    # Assertions
    "assert_chat_stream_valid",
    "assert_error_envelope",
    "assert_openai_chat_valid",
    "parse_sse_body",
    "sse_chunks",
    "stream_text",
]
