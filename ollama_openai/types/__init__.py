"""Type definitions for the proxy."""

from .ollama import (
    OllamaChatRequest,
    OllamaChatResponse,
    OllamaGenerateRequest,
    OllamaGenerateResponse,
    OllamaMessage,
    OllamaModel,
    OllamaOptions,
    OllamaTagsResponse,
)
from .openai import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    Choice,
    CompletionChoice,
    CompletionRequest,
    CompletionResponse,
    ContentPart,
    Delta,
    ErrorDetail,
    ErrorResponse,
    Model,
    ModelList,
    StreamChoice,
    Usage,
)

__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "Choice",
    "CompletionChoice",
    "CompletionRequest",
    "CompletionResponse",
    "ContentPart",
    "Delta",
    "ErrorDetail",
    "ErrorResponse",
    "Model",
    "ModelList",
    "OllamaChatRequest",
    "OllamaChatResponse",
    "OllamaGenerateRequest",
    "OllamaGenerateResponse",
    "OllamaMessage",
    "OllamaModel",
    "OllamaOptions",
    "OllamaTagsResponse",
    "StreamChoice",
    "Usage",
]
