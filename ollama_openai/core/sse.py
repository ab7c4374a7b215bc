"""SSE (Server-Sent Events) framing and NDJSON line parsing."""

import json
import logging
from typing import Any, Mapping, Optional, Union

logger = logging.getLogger("ollama-openai")

SSE_DONE = b"data: [DONE]\n\n"
DONE_MARKER = "[DONE]"


def encode_sse_data(payload: Mapping[str, Any]) -> bytes:
    """Frame one JSON payload as ``data: <json>\\n\\n``."""
    return b"data: " + json.dumps(payload, ensure_ascii=False).encode("utf-8") + b"\n\n"


def parse_ndjson_line(line: Union[str, bytes]) -> Optional[dict[str, Any]]:
    """Parse one line of Ollama's newline-delimited JSON output.

    Returns None for blank lines, non-JSON noise and JSON that is not an
    object; the caller skips those.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    text = line.strip()
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.debug(f"Skipping non-JSON backend line: {text[:100]}")
        return None
    if not isinstance(parsed, dict):
        logger.debug(f"Skipping non-object backend line: {text[:100]}")
        return None
    return parsed


def iter_sse_data(data: Union[str, bytes]) -> list[Union[dict[str, Any], str]]:
    """Split an SSE body into its ``data:`` payloads.

    JSON payloads are decoded; ``[DONE]`` and anything undecodable are
    returned as raw strings so callers can check ordering and termination.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    payloads: list[Union[dict[str, Any], str]] = []
    for event in data.split("\n\n"):
        for line in event.split("\n"):
            line = line.strip()
            if not line.startswith("data:"):
                continue
            body = line[5:].strip()
            if body == DONE_MARKER:
                payloads.append(DONE_MARKER)
                continue
            try:
                payloads.append(json.loads(body))
            except json.JSONDecodeError:
                payloads.append(body)
    return payloads
