"""Canonicalization of OpenAI's polymorphic message and prompt content.

OpenAI accepts message ``content`` as a plain string, a list of content
parts (``{"type": "text", "text": ...}``), or a list of strings. Ollama only
takes strings, so every shape is reduced to one canonical string:

    "hi"                                    -> "hi"
    ["a", "b"]                              -> "a b"
    [{"type": "text", "text": "a"}, "b"]    -> "a b"
    [{"type": "image_url", ...}, "b"]       -> "b"

The raw value is first classified into a ``MessageContent`` variant, then
rendered by ``render_content``, which handles every variant.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from ..core.exceptions import UnsupportedPromptError

PART_SEPARATOR = " "
PROMPT_SEPARATOR = "\n"


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class StringListContent:
    items: tuple[str, ...]


@dataclass(frozen=True)
class PartsContent:
    """A list mixing strings, text parts and parts we cannot render."""

    parts: tuple[Any, ...]


@dataclass(frozen=True)
class OpaqueContent:
    """Anything else; rendered generically."""

    value: Any


MessageContent = Union[TextContent, StringListContent, PartsContent, OpaqueContent]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def parse_content(value: Any) -> MessageContent:
    """Classify a raw JSON content value."""
    if isinstance(value, str):
        return TextContent(value)
    if _is_sequence(value):
        items = tuple(value)
        if all(isinstance(item, str) for item in items):
            return StringListContent(items)
        return PartsContent(items)
    return OpaqueContent(value)


def _part_text(part: Any) -> str | None:
    if isinstance(part, str):
        return part
    if isinstance(part, Mapping):
        text = part.get("text")
        if isinstance(text, str):
            return text
    return None


def _render_opaque(value: Any) -> str:
    if value is None:
        return ""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def render_content(content: MessageContent) -> str:
    """Render a classified content value to its canonical string."""
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, StringListContent):
        return PART_SEPARATOR.join(content.items)
    if isinstance(content, PartsContent):
        fragments = [text for text in map(_part_text, content.parts) if text is not None]
        return PART_SEPARATOR.join(fragments)
    if isinstance(content, OpaqueContent):
        return _render_opaque(content.value)
    raise TypeError(f"Unhandled content variant: {type(content).__name__}")


def content_to_text(value: Any) -> str:
    """Reduce any message content value to a single string."""
    return render_content(parse_content(value))


def prompt_to_text(prompt: Any) -> str:
    """Reduce a text-completion prompt to a single string.

    Raises:
        UnsupportedPromptError: If the prompt is not a string or a list of
            strings.
    """
    if isinstance(prompt, str):
        return prompt
    if _is_sequence(prompt) and all(isinstance(item, str) for item in prompt):
        return PROMPT_SEPARATOR.join(prompt)
    raise UnsupportedPromptError(
        "Prompt must be a string or an array of strings", code="invalid_prompt"
    )


def format_messages(messages: Sequence[Mapping[str, Any]]) -> str:
    """Render a conversation as ``role: content`` lines for usage estimation."""
    lines = []
    for message in messages:
        role = message.get("role") or ""
        lines.append(f"{role}: {content_to_text(message.get('content'))}\n")
    return "".join(lines)
