"""Web citation extraction from response messages."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TypeVar, cast

from routerchat.core.models import Citation
from routerchat.logic.content import extract_message_text

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\((https?://[^\s)]+)\)")
URL_CITATION_TYPE = "url_citation"


@dataclass(frozen=True, slots=True)
class MarkdownLink:
    """A ``[label](url)`` pair found in response text."""

    label: str
    url: str


_UrlItemT = TypeVar("_UrlItemT", Citation, MarkdownLink)


def _dedupe_by_url(items: Iterable[_UrlItemT]) -> list[_UrlItemT]:
    seen: set[str] = set()
    unique: list[_UrlItemT] = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


def extract_markdown_links(text: object) -> list[MarkdownLink]:
    """Collect markdown links with http(s) targets, first occurrence per URL."""
    if not isinstance(text, str) or not text:
        return []
    links = [
        MarkdownLink(label=match.group(1), url=match.group(2))
        for match in MARKDOWN_LINK_PATTERN.finditer(text)
    ]
    return _dedupe_by_url(links)


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _citation_from_annotation(annotation: object) -> Citation | None:
    if not isinstance(annotation, Mapping):
        return None
    annotation_map = cast("Mapping[str, object]", annotation)
    if annotation_map.get("type") != URL_CITATION_TYPE:
        return None

    nested = annotation_map.get(URL_CITATION_TYPE)
    if not isinstance(nested, Mapping):
        return None
    citation = cast("Mapping[str, object]", nested)

    url = citation.get("url")
    if not isinstance(url, str) or not url:
        return None

    return Citation(
        url=url,
        title=_optional_str(citation.get("title")),
        content=_optional_str(citation.get("content")),
        start_index=_optional_int(citation.get("start_index")),
        end_index=_optional_int(citation.get("end_index")),
        source="annotations",
    )


def extract_url_citations(message: object) -> list[Citation]:
    """Extract structured ``url_citation`` annotations from a message."""
    if not isinstance(message, Mapping):
        return []
    annotations = cast("Mapping[str, object]", message).get("annotations")
    if not isinstance(annotations, (list, tuple)):
        return []

    citations = [
        citation
        for annotation in annotations
        if (citation := _citation_from_annotation(annotation)) is not None
    ]
    return _dedupe_by_url(citations)


def extract_web_citations(message: object) -> list[Citation]:
    """Return de-duplicated web citations for a response message.

    Structured annotations take precedence. Only when a message has none are
    markdown links scraped from its text; the two sources are never merged.
    """
    url_citations = extract_url_citations(message)
    if url_citations:
        return url_citations

    links = extract_markdown_links(extract_message_text(message))
    return [
        Citation(url=link.url, title=link.label, source="markdown") for link in links
    ]
