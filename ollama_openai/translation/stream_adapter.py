"""Stream adapters converting Ollama NDJSON output to OpenAI SSE chunks.

Ollama streams one JSON object per line:
    {"model":"llama3","created_at":"...","message":{"role":"assistant","content":"Hel"},"done":false}
    {"model":"llama3","created_at":"...","message":{"role":"assistant","content":"lo"},"done":false}
    {"model":"llama3","created_at":"...","message":{"role":"assistant","content":""},"done":true}

OpenAI Chat Completion events:
    data: {"id":"chatcmpl-1","object":"chat.completion.chunk","choices":[{"index":0,"delta":{"content":"Hel"},"finish_reason":null}]}
    data: {"id":"chatcmpl-1","object":"chat.completion.chunk","choices":[{"index":0,"delta":{"content":"lo"},"finish_reason":null}]}
    data: {"id":"chatcmpl-1","object":"chat.completion.chunk","choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}
    data: [DONE]
"""

import logging
import time
from typing import Any, Optional, Union

from ..core.sse import SSE_DONE, encode_sse_data, parse_ndjson_line
from .content import content_to_text
from .response import (
    CHAT_ID_PREFIX,
    COMPLETION_ID_PREFIX,
    FINISH_REASON_STOP,
    generate_id,
)

logger = logging.getLogger("ollama-openai")


class OllamaChatStreamAdapter:
    """Converts /api/chat NDJSON lines into ``chat.completion.chunk`` frames.

    The id and creation time are fixed when the adapter is built, so every
    chunk of one exchange carries the same values. Once a ``done`` chunk has
    been translated the adapter is finished and ignores further input.
    """

    object_type = "chat.completion.chunk"
    id_prefix = CHAT_ID_PREFIX

    def __init__(
        self,
        model: str,
        completion_id: Optional[str] = None,
        created: Optional[int] = None,
    ) -> None:
        """Initialize the stream adapter.

        Args:
            model: Model name echoed into every chunk (the client's request model)
            completion_id: Fixed id for the exchange, generated when omitted
            created: Fixed unix timestamp for the exchange, now when omitted
        """
        self.model = model
        self.completion_id = completion_id or generate_id(self.id_prefix)
        self.created = int(time.time()) if created is None else created

        self.chunks_emitted = 0
        self.lines_skipped = 0
        self.finished = False

    def feed_line(self, line: Union[str, bytes]) -> list[bytes]:
        """Translate one backend line into zero or more SSE frames."""
        if self.finished:
            return []
        chunk = parse_ndjson_line(line)
        if chunk is None:
            if isinstance(line, (str, bytes)) and line.strip():
                self.lines_skipped += 1
            return []

        done = bool(chunk.get("done"))
        frames = [encode_sse_data(self.build_chunk(self.extract_text(chunk), done))]
        self.chunks_emitted += 1
        if done:
            frames.append(SSE_DONE)
            self.finished = True
            logger.debug(
                "Stream %s finished after %d chunks (%d lines skipped)",
                self.completion_id,
                self.chunks_emitted,
                self.lines_skipped,
            )
        return frames

    def extract_text(self, chunk: dict[str, Any]) -> str:
        message = chunk.get("message")
        if not isinstance(message, dict):
            return ""
        return content_to_text(message.get("content"))

    def build_chunk(self, text: str, done: bool) -> dict[str, Any]:
        delta: dict[str, Any] = {}
        if text:
            delta["content"] = text
        return {
            "id": self.completion_id,
            "object": self.object_type,
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "index": 0,
                    "delta": delta,
                    "finish_reason": FINISH_REASON_STOP if done else None,
                }
            ],
        }


class OllamaGenerateStreamAdapter(OllamaChatStreamAdapter):
    """Converts /api/generate NDJSON lines into ``text_completion`` frames."""

    object_type = "text_completion"
    id_prefix = COMPLETION_ID_PREFIX

    def extract_text(self, chunk: dict[str, Any]) -> str:
        text = chunk.get("response")
        if isinstance(text, str):
            return text
        return content_to_text(text)

    def build_chunk(self, text: str, done: bool) -> dict[str, Any]:
        return {
            "id": self.completion_id,
            "object": self.object_type,
            "created": self.created,
            "model": self.model,
            "choices": [
                {
                    "text": text,
                    "index": 0,
                    "logprobs": None,
                    "finish_reason": FINISH_REASON_STOP if done else None,
                }
            ],
        }
