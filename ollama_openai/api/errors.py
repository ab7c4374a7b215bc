"""OpenAI-style error envelopes for every failure the API surfaces."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ..core.exceptions import BackendError, ProxyError

logger = logging.getLogger("ollama-openai")


def error_body(message: str, error_type: str, code: Optional[str]) -> dict:
    return {"error": {"message": message, "type": error_type, "code": code}}


async def handle_proxy_error(request: Request, exc: ProxyError) -> JSONResponse:
    if isinstance(exc, BackendError):
        logger.error(
            "Ollama call failed for %s %s (%s): %s",
            request.method,
            request.url.path,
            exc.code,
            exc.detail,
        )
    elif exc.status_code >= 500:
        logger.error(f"Request to {request.url.path} failed: {exc}")
    else:
        logger.warning(
            "Rejected %s %s with %d %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.public_message, exc.error_type, exc.code),
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    error_type = "invalid_request_error" if exc.status_code < 500 else "internal_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), error_type, None),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body("Invalid request body", "invalid_request_error", "invalid_json"),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Render proxy and framework errors as ``{"error": {...}}`` bodies."""
    app.add_exception_handler(ProxyError, handle_proxy_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
