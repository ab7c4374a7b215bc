"""OpenAI-compatible text completions endpoint."""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..validation import parse_json_object, validate_completion_request, wants_stream
from .chat import SSE_HEADERS

logger = logging.getLogger("ollama-openai")


async def completions(request: Request) -> Response:
    """Handle POST /v1/completions (JSON, or SSE when ``stream: true``)."""
    logger.info(f"Handling {request.method} request to {request.url.path}")
    payload = validate_completion_request(parse_json_object(await request.body()))
    service = request.app.state.service

    if wants_stream(payload):
        pump = await service.completion_stream(payload, request.is_disconnected)
        return StreamingResponse(
            pump.drain(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(pump.aclose),
        )

    return JSONResponse(await service.completion(payload))
