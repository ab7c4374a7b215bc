"""Ollama native API wire types (/api/chat, /api/generate, /api/tags)."""

from typing_extensions import TypedDict


class OllamaOptions(TypedDict, total=False):
    """Generation options. Keys are only present when the client set them."""
    temperature: float
    top_p: float
    num_predict: int
    stop: list[str]
    presence_penalty: float
    frequency_penalty: float


class OllamaMessage(TypedDict, total=False):
    role: str
    content: str
    name: str


class OllamaChatRequest(TypedDict, total=False):
    model: str
    messages: list[OllamaMessage]
    stream: bool
    options: OllamaOptions


class OllamaGenerateRequest(TypedDict, total=False):
    model: str
    prompt: str
    stream: bool
    options: OllamaOptions


class OllamaChatResponse(TypedDict, total=False):
    """A full /api/chat reply, or one NDJSON line of a streamed reply."""
    model: str
    created_at: str
    message: OllamaMessage
    done: bool


class OllamaGenerateResponse(TypedDict, total=False):
    model: str
    created_at: str
    response: str
    done: bool


class OllamaModel(TypedDict, total=False):
    name: str
    modified_at: str
    size: int
    digest: str


class OllamaTagsResponse(TypedDict):
    models: list[OllamaModel]
