"""Authentication for the OpenAI-compatible API."""

from .api_key import extract_bearer_token, keys_match, require_api_key

__all__ = ["extract_bearer_token", "keys_match", "require_api_key"]
