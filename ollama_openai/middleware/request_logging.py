"""Access logging for every HTTP request."""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("ollama-openai")


class RequestLoggingMiddleware:
    """Log method, path, status and duration once the response completes.

    Streaming responses are logged when their last body chunk is sent.
    Headers are never logged.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status = 500
        method = scope.get("method", "-")
        path = scope.get("path", "-")

        async def send_wrapper(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info("%s %s -> %d (%.1f ms)", method, path, status, elapsed_ms)
