"""OpenAI -> Ollama request translation.

Key mappings:
- model            -> model (empty falls back to the configured default)
- messages[].content (any shape) -> plain string
- prompt (string | list[str])    -> prompt string joined with newlines
- temperature, top_p, presence_penalty, frequency_penalty -> same option name
- max_tokens       -> options.num_predict
- stop (string | list)           -> options.stop (list of strings)

Options the client did not send are left out of the Ollama request, so the
model's own defaults apply instead of a zero value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional

from ..types.ollama import (
    OllamaChatRequest,
    OllamaGenerateRequest,
    OllamaMessage,
    OllamaOptions,
)
from .content import content_to_text, prompt_to_text

if TYPE_CHECKING:
    from ..config_loader import ProxyConfig

logger = logging.getLogger("ollama-openai")

# OpenAI request field -> Ollama option name
OPTION_FIELDS = {
    "temperature": "temperature",
    "top_p": "top_p",
    "max_tokens": "num_predict",
    "presence_penalty": "presence_penalty",
    "frequency_penalty": "frequency_penalty",
}


def normalize_stop(stop: Any) -> Optional[list[str]]:
    """Normalize OpenAI ``stop`` into Ollama's list of strings.

    A single string becomes a one-element list; for a list only the string
    elements are kept, in order. Other shapes yield ``None`` (no stop option).
    """
    if isinstance(stop, str):
        return [stop]
    if isinstance(stop, Sequence) and not isinstance(stop, (bytes, bytearray)):
        return [item for item in stop if isinstance(item, str)]
    return None


def build_options(request: Mapping[str, Any]) -> OllamaOptions:
    """Copy only the generation options explicitly present in the request."""
    options: OllamaOptions = {}
    for openai_name, ollama_name in OPTION_FIELDS.items():
        value = request.get(openai_name)
        if value is not None:
            options[ollama_name] = value

    if request.get("stop") is not None:
        stop = normalize_stop(request["stop"])
        if stop:
            options["stop"] = stop
    return options


def canonicalize_message(message: Mapping[str, Any]) -> OllamaMessage:
    """Return a copy of the message with its content flattened to a string."""
    converted: OllamaMessage = {
        "role": message.get("role") or "",
        "content": content_to_text(message.get("content")),
    }
    name = message.get("name")
    if isinstance(name, str) and name:
        converted["name"] = name
    return converted


class RequestTranslator:
    """Builds Ollama requests from validated OpenAI requests."""

    def __init__(self, config: ProxyConfig) -> None:
        self.default_model = config.ollama_model
        self.pin_completion_model = config.pin_completion_model

    def resolve_model(self, requested: Any) -> str:
        if isinstance(requested, str) and requested:
            return requested
        return self.default_model

    def translate_chat(
        self, request: Mapping[str, Any], stream: bool = False
    ) -> OllamaChatRequest:
        """Translate a chat completion request for POST /api/chat."""
        model = self.resolve_model(request.get("model"))
        messages = [canonicalize_message(m) for m in request.get("messages") or []]
        body: OllamaChatRequest = {
            "model": model,
            "messages": messages,
            "stream": stream,
        }
        options = build_options(request)
        if options:
            body["options"] = options
        logger.debug(
            "Translated chat request: model=%s messages=%d options=%s stream=%s",
            model,
            len(messages),
            sorted(options),
            stream,
        )
        return body

    def translate_completion(
        self, request: Mapping[str, Any], stream: bool = False
    ) -> OllamaGenerateRequest:
        """Translate a text completion request for POST /api/generate.

        Raises:
            UnsupportedPromptError: If the prompt shape is not supported.
        """
        prompt = prompt_to_text(request.get("prompt"))
        if self.pin_completion_model:
            model = self.default_model
        else:
            model = self.resolve_model(request.get("model"))
        body: OllamaGenerateRequest = {
            "model": model,
            "prompt": prompt,
            "stream": stream,
        }
        options = build_options(request)
        if options:
            body["options"] = options
        logger.debug(
            "Translated completion request: model=%s prompt_chars=%d options=%s",
            model,
            len(prompt),
            sorted(options),
        )
        return body
