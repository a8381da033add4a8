"""Text extraction from chat message content."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast


def _part_text(part: object) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, Mapping):
        text = cast("Mapping[str, object]", part).get("text")
        if isinstance(text, str):
            return text
    return ""


def extract_text(content: object) -> str:
    """Flatten a message ``content`` value into a single string.

    Plain strings are returned unchanged. Sequences of parts contribute each
    string part, or each part's string ``text`` field, concatenated in order
    with no separator. Any other shape yields an empty string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return "".join(text for part in content if (text := _part_text(part)))
    return ""


def extract_message_text(message: object) -> str:
    """Extract the text of a response message mapping."""
    if not isinstance(message, Mapping):
        return ""
    return extract_text(cast("Mapping[str, object]", message).get("content"))
