"""ollama-openai - OpenAI-compatible API in front of Ollama

Accepts OpenAI chat completion, text completion and model listing requests,
translates them to Ollama's native API and translates the answers back,
including token-by-token streaming as Server-Sent Events.

Example:
    >>> from ollama_openai import create_app, load_config
    >>> import uvicorn
    >>> uvicorn.run(create_app(load_config()), host="0.0.0.0", port=8080)
"""

from .app import create_app
from .config_loader import ProxyConfig, load_config
from .logging import logger, setup_logging
from .service import OllamaService

__all__ = [
    "create_app",
    "load_config",
    "logger",
    "OllamaService",
    "ProxyConfig",
    "setup_logging",
]
