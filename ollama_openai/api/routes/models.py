"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

logger = logging.getLogger("ollama-openai")


async def list_models(request: Request) -> dict:
    """List the models Ollama has pulled, in OpenAI format.

    GET /v1/models

    Returns:
        ``{"object": "list", "data": [...]}`` with one entry per Ollama model.
    """
    logger.info("Received models list request")
    return await request.app.state.service.list_models()
