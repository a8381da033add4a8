"""Data models for routerchat."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Role = Literal["user", "assistant"]
ModelKind = Literal["text", "image"]
CitationSource = Literal["annotations", "markdown"]


@dataclass(frozen=True, slots=True)
class Citation:
    """A web source referenced by an assistant response."""

    url: str
    title: str | None = None
    content: str | None = None
    start_index: int | None = None
    end_index: int | None = None
    source: CitationSource = "annotations"

    def to_dict(self) -> dict[str, object]:
        """Return the JSON-serializable form used in smoke artifacts."""
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """One message in a conversation.

    A turn is considered empty when it has neither text nor images; empty
    turns are never stored in a transcript.
    """

    role: Role
    created_at: datetime
    text: str = ""
    images: tuple[str, ...] = ()
    citations: tuple[Citation, ...] = field(default=())

    def is_empty(self) -> bool:
        """Return True when the turn carries no text and no images."""
        return not self.text and not self.images


@dataclass(frozen=True, slots=True)
class ModelDescriptor:
    """Static catalog entry for a selectable model."""

    id: str
    label: str
    kind: ModelKind = "text"


@dataclass(frozen=True, slots=True)
class DecodedImage:
    """Raw bytes decoded from a base64 data URL."""

    mime: str
    data: bytes
