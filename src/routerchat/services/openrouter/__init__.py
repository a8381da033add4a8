"""OpenRouter transport and error helpers."""

from routerchat.services.openrouter.client import (
    OpenRouterClient,
    build_openrouter_headers,
)
from routerchat.services.openrouter.errors import (
    OpenRouterAPIError,
    OpenRouterErrorDetails,
    error_for_status,
    extract_openrouter_error_details,
    format_openrouter_error,
    raise_for_openrouter_payload_error,
)

__all__ = [
    "OpenRouterAPIError",
    "OpenRouterClient",
    "OpenRouterErrorDetails",
    "build_openrouter_headers",
    "error_for_status",
    "extract_openrouter_error_details",
    "format_openrouter_error",
    "raise_for_openrouter_payload_error",
]
