"""HTTP surface: routes, validation and error rendering."""

from .errors import error_body, install_error_handlers
from .validation import (
    parse_json_object,
    validate_chat_request,
    validate_completion_request,
)

__all__ = [
    "error_body",
    "install_error_handlers",
    "parse_json_object",
    "validate_chat_request",
    "validate_completion_request",
]
