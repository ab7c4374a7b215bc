"""Inbound request validation for the OpenAI endpoints.

Everything here runs before the backend is contacted, so a rejected
request never costs an Ollama call.
"""

import json
import logging
from typing import Any, Mapping

from ..core.exceptions import InvalidRequestError

logger = logging.getLogger("ollama-openai")

_NUMBER = (int, float)

# Field -> accepted JSON types. bool is excluded from numbers explicitly.
_CHAT_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "model": (str,),
    "messages": (list,),
    "temperature": _NUMBER,
    "top_p": _NUMBER,
    "max_tokens": (int,),
    "presence_penalty": _NUMBER,
    "frequency_penalty": _NUMBER,
    "stream": (bool,),
    "stop": (str, list),
    "user": (str,),
}

_COMPLETION_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    key: value for key, value in _CHAT_FIELD_TYPES.items() if key != "messages"
}

_MESSAGE_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "role": (str,),
    "name": (str,),
}


def parse_json_object(body: bytes) -> dict[str, Any]:
    """Decode a request body that must be a JSON object."""
    try:
        payload = json.loads(body or b"")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error(f"Invalid JSON payload: {exc}")
        raise InvalidRequestError(f"Invalid request body: {exc}", code="invalid_json") from exc
    if not isinstance(payload, dict):
        logger.error("Payload must be a JSON object")
        raise InvalidRequestError("Request body must be a JSON object", code="invalid_json_shape")
    return payload


def _check_types(payload: Mapping[str, Any], field_types: Mapping[str, tuple[type, ...]]) -> None:
    for name, accepted in field_types.items():
        value = payload.get(name)
        if value is None:
            continue
        if isinstance(value, bool) and bool not in accepted:
            valid = False
        else:
            valid = isinstance(value, accepted)
        if not valid:
            logger.error("Field %s has unexpected type %s", name, type(value).__name__)
            raise InvalidRequestError(
                f"Invalid request body: field '{name}' has the wrong type",
                code="invalid_json",
            )


def validate_chat_request(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Check a decoded /v1/chat/completions body.

    Raises:
        InvalidRequestError: ``invalid_json`` for wrongly typed fields,
            ``missing_model`` or ``missing_messages`` for absent ones.
    """
    _check_types(payload, _CHAT_FIELD_TYPES)
    messages = payload.get("messages")
    if messages is not None and not all(isinstance(item, dict) for item in messages):
        raise InvalidRequestError(
            "Invalid request body: every message must be an object", code="invalid_json"
        )
    for message in messages or ():
        _check_types(message, _MESSAGE_FIELD_TYPES)

    if not payload.get("model"):
        raise InvalidRequestError("Model is required", code="missing_model")
    if not messages:
        raise InvalidRequestError("Messages are required", code="missing_messages")

    logger.debug(f"Parsed request: model={payload['model']}, messages={len(messages)}")
    return payload


def validate_completion_request(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Check a decoded /v1/completions body.

    The prompt's shape is checked later by the request translator.
    """
    _check_types(payload, _COMPLETION_FIELD_TYPES)
    if not payload.get("model"):
        raise InvalidRequestError("Model is required", code="missing_model")
    if payload.get("prompt") is None:
        raise InvalidRequestError("Prompt is required", code="missing_prompt")
    return payload


def wants_stream(payload: Mapping[str, Any]) -> bool:
    return payload.get("stream") is True
