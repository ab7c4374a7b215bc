"""Core exceptions for the proxy.

Each exception knows how it is presented to OpenAI clients: HTTP status,
error ``type`` and a stable machine-readable ``code``. The API layer turns
them into ``{"error": {"message", "type", "code"}}`` envelopes.
"""

from typing import Optional


class ProxyError(Exception):
    """Base exception for proxy errors."""

    status_code = 500
    error_type = "internal_error"
    default_code = "internal_error"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    @property
    def public_message(self) -> str:
        """Message that is safe to show to API clients."""
        return self.message


class ConfigurationError(ProxyError):
    """Raised when there's an issue with the configuration."""

    default_code = "configuration_error"


class InvalidRequestError(ProxyError):
    """Raised when an incoming request is invalid."""

    status_code = 400
    error_type = "invalid_request_error"
    default_code = "invalid_request"


class UnsupportedPromptError(InvalidRequestError):
    """Raised when a completion prompt is neither a string nor a list of strings."""

    default_code = "invalid_prompt"


class AuthenticationError(ProxyError):
    """Raised when the bearer API key is missing or wrong."""

    status_code = 401
    error_type = "invalid_request_error"
    default_code = "invalid_api_key"


class BackendError(ProxyError):
    """Raised when the Ollama call fails (transport, status or decode).

    ``detail`` carries the backend's own description and is only logged;
    clients get a generic message.
    """

    default_code = "ollama_error"

    def __init__(
        self,
        detail: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(detail, code)
        self.detail = detail
        self.backend_status = status

    @property
    def public_message(self) -> str:
        return "Internal server error"
