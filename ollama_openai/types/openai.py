"""OpenAI-compatible wire types.

These follow the public OpenAI API shapes served by the proxy:
- Chat Completions requests, responses and streaming chunks
- Legacy text Completions requests, responses and streaming chunks
- Model listing and the error envelope
"""

from typing import Any, Optional, Union

from typing_extensions import TypedDict


# =============================================================================
# Messages
# =============================================================================


class ContentPart(TypedDict, total=False):
    """A content part of a multi-modal message.

    Only ``text`` matters to the proxy; image/audio parts are dropped during
    canonicalization because Ollama's chat API takes plain strings.
    """
    type: str
    text: str
    image_url: dict[str, Any]


class ChatMessage(TypedDict, total=False):
    """A message in a chat conversation.

    Attributes:
        role: "system", "user", "assistant" or "tool".
        content: A string, a list of ContentPart objects, or a list of
            strings. Reduced to one string before reaching Ollama.
        name: Optional name for the speaker.
    """
    role: str
    content: Union[str, list[Union[ContentPart, str]], None]
    name: str


# =============================================================================
# Chat Completions
# =============================================================================


class ChatCompletionRequest(TypedDict, total=False):
    model: str
    messages: list[ChatMessage]
    stream: bool
    temperature: float
    top_p: float
    max_tokens: int
    stop: Union[str, list[str]]
    presence_penalty: float
    frequency_penalty: float
    n: int
    user: str


class Usage(TypedDict):
    """Approximate token usage (characters / 4, see estimate_tokens)."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class Choice(TypedDict):
    index: int
    message: ChatMessage
    finish_reason: str


class ChatCompletionResponse(TypedDict):
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage


class Delta(TypedDict, total=False):
    """Incremental assistant content in a streamed chunk."""
    role: str
    content: str


class StreamChoice(TypedDict):
    index: int
    delta: Delta
    finish_reason: Optional[str]


class ChatCompletionChunk(TypedDict):
    """One ``chat.completion.chunk`` SSE payload.

    ``id`` and ``created`` are identical for every chunk of one stream.
    """
    id: str
    object: str
    created: int
    model: str
    choices: list[StreamChoice]


# =============================================================================
# Text Completions
# =============================================================================


class CompletionRequest(TypedDict, total=False):
    model: str
    prompt: Union[str, list[str]]
    stream: bool
    temperature: float
    top_p: float
    max_tokens: int
    stop: Union[str, list[str]]
    presence_penalty: float
    frequency_penalty: float
    echo: bool
    logprobs: int
    user: str


class CompletionChoice(TypedDict):
    text: str
    index: int
    logprobs: Optional[Any]
    finish_reason: Optional[str]


class CompletionResponse(TypedDict, total=False):
    id: str
    object: str
    created: int
    model: str
    choices: list[CompletionChoice]
    usage: Usage


# =============================================================================
# Models and errors
# =============================================================================


class Model(TypedDict):
    id: str
    object: str
    created: int
    owned_by: str


class ModelList(TypedDict):
    object: str
    data: list[Model]


class ErrorDetail(TypedDict):
    message: str
    type: str
    code: str


class ErrorResponse(TypedDict):
    error: ErrorDetail
