"""OpenAI-compatible chat completions endpoint."""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..validation import parse_json_object, validate_chat_request, wants_stream

logger = logging.getLogger("ollama-openai")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def chat_completions(request: Request) -> Response:
    """Handle POST /v1/chat/completions.

    Non-streaming requests get a single ``chat.completion`` object. With
    ``stream: true`` the reply is an SSE stream of ``chat.completion.chunk``
    frames ending in ``data: [DONE]``. Backend failures before the first
    frame become a 500 error envelope.
    """
    logger.info(f"Handling {request.method} request to {request.url.path}")
    payload = validate_chat_request(parse_json_object(await request.body()))
    service = request.app.state.service

    if wants_stream(payload):
        pump = await service.chat_completion_stream(payload, request.is_disconnected)
        return StreamingResponse(
            pump.drain(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(pump.aclose),
        )

    result = await service.chat_completion(payload)
    return JSONResponse(result)
