"""Ollama -> OpenAI response translation for single-shot replies.

Usage numbers are an approximation: Ollama's chat/generate replies are
translated without a tokenizer, so every count is ``len(text) // 4``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from typing import Any

from ..types.openai import (
    ChatCompletionResponse,
    CompletionResponse,
    Model,
    ModelList,
    Usage,
)
from .content import content_to_text, format_messages, prompt_to_text

logger = logging.getLogger("ollama-openai")

CHAT_ID_PREFIX = "chatcmpl"
COMPLETION_ID_PREFIX = "cmpl"
FINISH_REASON_STOP = "stop"
MODEL_OWNER = "ollama"

_id_lock = threading.Lock()
_last_id_ns = 0


def generate_id(prefix: str = CHAT_ID_PREFIX) -> str:
    """Generate a process-unique id from a strictly increasing ns timestamp."""
    global _last_id_ns
    with _id_lock:
        now = time.time_ns()
        _last_id_ns = now if now > _last_id_ns else _last_id_ns + 1
        value = _last_id_ns
    return f"{prefix}-{value}"


def estimate_tokens(text: str) -> int:
    """Rough token count: four characters per token, rounded down."""
    return len(text) // 4


def build_usage(prompt_text: str, completion_text: str) -> Usage:
    prompt_tokens = estimate_tokens(prompt_text)
    completion_tokens = estimate_tokens(completion_text)
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


class ResponseTranslator:
    """Wraps Ollama replies in OpenAI envelopes."""

    def chat_completion(
        self,
        backend_response: Mapping[str, Any],
        request: Mapping[str, Any],
    ) -> ChatCompletionResponse:
        """Translate an /api/chat reply into a ``chat.completion`` object.

        The response's ``model`` echoes what the client asked for, not the
        model Ollama actually ran.
        """
        message = backend_response.get("message") or {}
        if not isinstance(message, Mapping):
            message = {}
        content = content_to_text(message.get("content"))
        role = message.get("role") or "assistant"

        return {
            "id": generate_id(CHAT_ID_PREFIX),
            "object": "chat.completion",
            "created": int(time.time()),
            "model": request.get("model") or "",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": role, "content": content},
                    "finish_reason": FINISH_REASON_STOP,
                }
            ],
            "usage": build_usage(
                format_messages(request.get("messages") or []), content
            ),
        }

    def text_completion(
        self,
        backend_response: Mapping[str, Any],
        request: Mapping[str, Any],
    ) -> CompletionResponse:
        """Translate an /api/generate reply into a ``text_completion`` object."""
        text = backend_response.get("response")
        if not isinstance(text, str):
            text = content_to_text(text)
        prompt = prompt_to_text(request.get("prompt"))

        return {
            "id": generate_id(COMPLETION_ID_PREFIX),
            "object": "text_completion",
            "created": int(time.time()),
            "model": request.get("model") or "",
            "choices": [
                {
                    "text": text,
                    "index": 0,
                    "logprobs": None,
                    "finish_reason": FINISH_REASON_STOP,
                }
            ],
            "usage": build_usage(prompt, text),
        }

    def model_list(self, backend_models: Iterable[Mapping[str, Any]]) -> ModelList:
        """Translate /api/tags entries into an OpenAI model list.

        Ollama has no stable creation time to pass through, so ``created``
        is the time of the listing.
        """
        created = int(time.time())
        data: list[Model] = []
        for entry in backend_models:
            name = entry.get("name") if isinstance(entry, Mapping) else None
            if not isinstance(name, str):
                logger.warning("Ollama model entry without a usable name: %r", entry)
                name = ""
            data.append(
                {
                    "id": name,
                    "object": "model",
                    "created": created,
                    "owned_by": MODEL_OWNER,
                }
            )
        return {"object": "list", "data": data}
