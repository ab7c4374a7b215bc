"""Bearer API key authentication for the /v1 endpoints."""

from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import Request

from ..core.exceptions import AuthenticationError

logger = logging.getLogger("ollama-openai")

BEARER_PREFIX = "Bearer "


def extract_bearer_token(header_value: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <key>`` header.

    Raises:
        AuthenticationError: ``missing_authorization`` when the header is
            absent or empty, ``invalid_authorization_format`` when it does
            not start with ``Bearer ``.
    """
    if not header_value:
        raise AuthenticationError(
            "Authorization header is required", code="missing_authorization"
        )
    if not header_value.startswith(BEARER_PREFIX):
        raise AuthenticationError(
            "Authorization header must start with 'Bearer '",
            code="invalid_authorization_format",
        )
    return header_value[len(BEARER_PREFIX):]


def keys_match(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def require_api_key(request: Request) -> None:
    """FastAPI dependency guarding the OpenAI routes.

    A proxy started without an ``api_key`` accepts every request.
    """
    config = request.app.state.config
    if not config.auth_enabled:
        return

    token = extract_bearer_token(request.headers.get("Authorization"))
    if not keys_match(token, config.api_key):
        logger.warning(f"Request to {request.url.path} rejected: invalid API key")
        raise AuthenticationError("Invalid API key", code="invalid_api_key")
