"""OpenRouter error parsing helpers.

OpenRouter returns a JSON error envelope:

    {"error": {"code": <int>, "message": <str>, "metadata": {...}?}}

Errors can arrive with a non-2xx status or, for some upstream provider
failures, inside a 200 response whose first choice has
``finish_reason == "error"``. This module normalizes both into
``OpenRouterAPIError`` with a stable, human-readable message.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, cast

ERROR_BODY_PREVIEW_CHARS = 200
_FINISH_REASON_ERROR_MESSAGE = "OpenRouter response ended with finish_reason=error"


@dataclass(slots=True)
class OpenRouterErrorDetails:
    """Normalized view of an OpenRouter error."""

    http_status: int | None
    code: int | str | None
    message: str
    metadata: dict[str, Any] | None


class OpenRouterAPIError(RuntimeError):
    """Raised when OpenRouter returns an error status or error payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: int | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Create an OpenRouterAPIError.

        Args:
            message: Human-readable error message.
            status_code: Optional HTTP status code when known.
            code: OpenRouter error code (numeric HTTP code or string code).
            metadata: Optional OpenRouter error metadata payload.

        """
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.metadata = metadata


def try_parse_json(value: str) -> object | None:
    """Parse JSON text, returning None instead of raising."""
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return None


def _coerce_error_details(error_obj: object) -> OpenRouterErrorDetails | None:
    if not isinstance(error_obj, dict):
        return None
    error_map = cast("dict[str, Any]", error_obj)

    code = error_map.get("code")
    message = error_map.get("message")
    metadata = error_map.get("metadata")
    if not isinstance(message, str) or not message.strip():
        return None
    if metadata is not None and not isinstance(metadata, dict):
        metadata = None

    return OpenRouterErrorDetails(
        http_status=code if isinstance(code, int) and not isinstance(code, bool) else None,
        code=code if isinstance(code, (int, str)) else None,
        message=message.strip(),
        metadata=metadata,
    )


def extract_openrouter_error_details(payload: object) -> OpenRouterErrorDetails | None:
    """Extract OpenRouter error details from a decoded JSON payload."""
    if not isinstance(payload, dict):
        return None
    return _coerce_error_details(cast("dict[str, Any]", payload).get("error"))


def _format_metadata(metadata: dict[str, Any] | None) -> str:
    if not metadata:
        return ""

    # Moderation errors
    reasons = metadata.get("reasons")
    if (
        isinstance(reasons, list)
        and reasons
        and all(isinstance(item, str) for item in reasons)
    ):
        joined = ", ".join(reasons[:5])
        return f" | reasons={joined}"

    # Provider errors
    provider_name = metadata.get("provider_name")
    if isinstance(provider_name, str) and provider_name.strip():
        return f" | provider={provider_name.strip()}"

    return ""


def format_openrouter_error(
    details: OpenRouterErrorDetails,
    *,
    http_status: int | None = None,
) -> str:
    """Format OpenRouter error details into a stable, human-readable string."""
    status = http_status if http_status is not None else details.http_status
    meta_suffix = _format_metadata(details.metadata)

    if isinstance(status, int):
        return f"OpenRouter HTTP {status}: {details.message}{meta_suffix}"

    if details.code is not None:
        return f"OpenRouter error ({details.code}): {details.message}{meta_suffix}"

    return f"OpenRouter error: {details.message}{meta_suffix}"


def error_for_status(status_code: int, body_text: str) -> OpenRouterAPIError:
    """Build the exception for a non-success HTTP response."""
    details = extract_openrouter_error_details(try_parse_json(body_text))
    if details is not None:
        return OpenRouterAPIError(
            format_openrouter_error(details, http_status=status_code),
            status_code=status_code,
            code=details.code,
            metadata=details.metadata,
        )

    preview = body_text.strip()[:ERROR_BODY_PREVIEW_CHARS]
    message = f"OpenRouter HTTP {status_code}: {preview or 'empty response body'}"
    return OpenRouterAPIError(message, status_code=status_code)


def _first_finish_reason(payload: dict[str, Any]) -> object:
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        return None
    return cast("dict[str, Any]", first_choice).get("finish_reason")


def raise_for_openrouter_payload_error(*, payload_obj: object) -> None:
    """Raise when a successful response body still reports an error.

    This checks both the standard ``{"error": ...}`` envelope and a first
    choice whose ``finish_reason`` is ``error``.
    """
    details = extract_openrouter_error_details(payload_obj)
    if details is not None:
        raise OpenRouterAPIError(
            format_openrouter_error(details),
            status_code=details.http_status,
            code=details.code,
            metadata=details.metadata,
        )

    if not isinstance(payload_obj, dict):
        return

    finish_reason = _first_finish_reason(cast("dict[str, Any]", payload_obj))
    if finish_reason is not None and str(finish_reason).strip().lower() == "error":
        raise OpenRouterAPIError(_FINISH_REASON_ERROR_MESSAGE, code="server_error")
