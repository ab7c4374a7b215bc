"""OpenAI <-> Ollama translation.

Requests go through ``RequestTranslator``; single-shot replies through
``ResponseTranslator``; streamed NDJSON through the stream adapters.
"""

from .content import (
    content_to_text,
    format_messages,
    parse_content,
    prompt_to_text,
    render_content,
)
from .request import RequestTranslator, build_options, normalize_stop
from .response import ResponseTranslator, estimate_tokens, generate_id
from .stream_adapter import OllamaChatStreamAdapter, OllamaGenerateStreamAdapter

__all__ = [
    "OllamaChatStreamAdapter",
    "OllamaGenerateStreamAdapter",
    "RequestTranslator",
    "ResponseTranslator",
    "build_options",
    "content_to_text",
    "estimate_tokens",
    "format_messages",
    "generate_id",
    "normalize_stop",
    "parse_content",
    "prompt_to_text",
    "render_content",
]
