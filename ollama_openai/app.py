"""FastAPI application factory for the Ollama OpenAI-compatible proxy."""

import logging
import socket
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import install_error_handlers
from .api.routes import chat_completions, completions, health, list_models
from .auth import require_api_key
from .config_loader import ProxyConfig, load_config
from .core.backend import OllamaClient
from .middleware import RequestLoggingMiddleware
from .service import OllamaService

logger = logging.getLogger("ollama-openai")

CORS_METHODS = ["GET", "POST", "HEAD", "PUT", "DELETE", "PATCH", "OPTIONS"]
CORS_HEADERS = ["Origin", "Content-Type", "Accept", "Authorization"]


def create_app(
    config: Optional[ProxyConfig] = None,
    client: Optional[OllamaClient] = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        config: Settings to serve with. Loaded with ``load_config()`` when
            omitted.
        client: Ollama client override, mainly for tests.

    Returns:
        The configured FastAPI application.
    """
    config = config or load_config()
    app = FastAPI(title="Ollama OpenAI-compatible API")
    app.state.config = config
    app.state.service = OllamaService(config, client=client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_credentials=False,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
    app.add_middleware(RequestLoggingMiddleware)
    install_error_handlers(app)

    guarded = [Depends(require_api_key)]
    app.post("/v1/chat/completions", dependencies=guarded)(chat_completions)
    app.post("/v1/completions", dependencies=guarded)(completions)
    app.get("/v1/models", dependencies=guarded)(list_models)
    app.get("/health")(health)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Ollama OpenAI proxy starting up...")
        logger.info("Configured bind address %s:%s", config.host, config.port)
        if config.host == "0.0.0.0":
            hostname = socket.gethostname()
            logger.info("Reachable on local network at http://%s:%s", hostname, config.port)
        logger.info(f"Ollama backend: {config.ollama_url} (default model {config.ollama_model})")
        if not config.auth_enabled:
            logger.warning("No API key configured; /v1 endpoints accept unauthenticated requests")
        if config.pin_completion_model:
            logger.info("Text completions always use the default model %s", config.ollama_model)

    logger.info("FastAPI application created")
    return app
