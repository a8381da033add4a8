"""Tagged decoding of chat-completion payloads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import cast

from routerchat.core.exceptions import MALFORMED_RESPONSE_MESSAGE
from routerchat.core.models import Citation
from routerchat.logic.citations import extract_web_citations
from routerchat.logic.content import extract_message_text
from routerchat.logic.images import extract_response_images


@dataclass(frozen=True, slots=True)
class CompletionOk:
    """A response that contained a message, possibly with empty fields."""

    text: str = ""
    images: tuple[str, ...] = ()
    citations: tuple[Citation, ...] = field(default=())

    def is_empty(self) -> bool:
        """Return True when there is neither text nor an image."""
        return not self.text and not self.images


@dataclass(frozen=True, slots=True)
class CompletionMalformed:
    """A response without a usable ``choices[0].message`` object."""

    reason: str = MALFORMED_RESPONSE_MESSAGE


CompletionResult = CompletionOk | CompletionMalformed


def first_choice_message(payload: object) -> Mapping[str, object] | None:
    """Return ``choices[0].message`` when every step has the expected shape."""
    if not isinstance(payload, Mapping):
        return None
    choices = cast("Mapping[str, object]", payload).get("choices")
    if not isinstance(choices, (list, tuple)) or not choices:
        return None
    first_choice = choices[0]
    if not isinstance(first_choice, Mapping):
        return None
    message = cast("Mapping[str, object]", first_choice).get("message")
    if not isinstance(message, Mapping):
        return None
    return cast("Mapping[str, object]", message)


def decode_completion(payload: object) -> CompletionResult:
    """Decode a provider payload field by field.

    Missing or oddly shaped ``content``, ``images`` or ``annotations`` degrade
    to empty values; only a missing message is reported as malformed.
    """
    message = first_choice_message(payload)
    if message is None:
        return CompletionMalformed()

    return CompletionOk(
        text=extract_message_text(message),
        images=tuple(extract_response_images(message)),
        citations=tuple(extract_web_citations(message)),
    )
