"""Service layer: one inbound OpenAI request -> one Ollama call -> OpenAI reply."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

from .core.backend import OllamaClient
from .core.streaming import StreamPump
from .translation.request import RequestTranslator
from .translation.response import ResponseTranslator
from .translation.stream_adapter import (
    OllamaChatStreamAdapter,
    OllamaGenerateStreamAdapter,
)
from .types.openai import ChatCompletionResponse, CompletionResponse, ModelList

if TYPE_CHECKING:
    from .config_loader import ProxyConfig

logger = logging.getLogger("ollama-openai")

DisconnectChecker = Callable[[], Awaitable[bool]]


class OllamaService:
    """Serves the OpenAI endpoints from an Ollama backend.

    Requests arrive already validated by the API layer.
    """

    def __init__(self, config: ProxyConfig, client: Optional[OllamaClient] = None) -> None:
        self.config = config
        self.client = client or OllamaClient(config)
        self.request_translator = RequestTranslator(config)
        self.response_translator = ResponseTranslator()

    async def chat_completion(self, request: Mapping[str, Any]) -> ChatCompletionResponse:
        body = self.request_translator.translate_chat(request, stream=False)
        backend_response = await self.client.chat(body)
        return self.response_translator.chat_completion(backend_response, request)

    async def chat_completion_stream(
        self,
        request: Mapping[str, Any],
        disconnect_checker: Optional[DisconnectChecker] = None,
    ) -> StreamPump:
        """Open the backend stream and return a pump ready to be drained.

        Raises:
            BackendError: If the stream cannot be opened. Nothing has been
                written to the client yet.
        """
        body = self.request_translator.translate_chat(request, stream=True)
        backend_stream = await self.client.stream_chat(body)
        adapter = OllamaChatStreamAdapter(model=request.get("model") or "")
        logger.info(
            "Streaming chat completion %s for model %s", adapter.completion_id, body["model"]
        )
        return self._pump(backend_stream, adapter, disconnect_checker)

    async def completion(self, request: Mapping[str, Any]) -> CompletionResponse:
        body = self.request_translator.translate_completion(request, stream=False)
        backend_response = await self.client.generate(body)
        return self.response_translator.text_completion(backend_response, request)

    async def completion_stream(
        self,
        request: Mapping[str, Any],
        disconnect_checker: Optional[DisconnectChecker] = None,
    ) -> StreamPump:
        body = self.request_translator.translate_completion(request, stream=True)
        backend_stream = await self.client.stream_generate(body)
        adapter = OllamaGenerateStreamAdapter(model=request.get("model") or "")
        logger.info(
            "Streaming text completion %s for model %s", adapter.completion_id, body["model"]
        )
        return self._pump(backend_stream, adapter, disconnect_checker)

    async def list_models(self) -> ModelList:
        models = await self.client.tags()
        logger.debug(f"Ollama reported {len(models)} models")
        return self.response_translator.model_list(models)

    def _pump(self, backend_stream, adapter, disconnect_checker) -> StreamPump:
        return StreamPump(
            backend_stream,
            adapter,
            queue_size=self.config.stream_queue_size,
            stall_timeout=self.config.stream_stall_timeout,
            disconnect_checker=disconnect_checker,
        )
