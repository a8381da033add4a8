"""Markdown export of a conversation transcript."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from routerchat.core.config import EXPORT_TITLE, NO_TEXT_PLACEHOLDER
from routerchat.logic.images import extension_for_data_url, parse_data_url
from routerchat.utils.timestamps import filename_stamp, iso_timestamp, utc_now

if TYPE_CHECKING:
    from routerchat.core.models import ChatTurn, Citation
    from routerchat.logic.transcript import Transcript

logger = logging.getLogger(__name__)

ROLE_HEADINGS = {"user": "User", "assistant": "Assistant"}


@dataclass(frozen=True, slots=True)
class ImageAsset:
    """An image referenced by the exported document."""

    filename: str
    data_url: str


def image_filename(turn: ChatTurn, index: int) -> str:
    """Derive the export filename for the ``index``-th (1-based) image of a turn."""
    extension = extension_for_data_url(turn.images[index - 1])
    return f"{filename_stamp(turn.created_at)}-{index}.{extension}"


def export_filename(exported_at: datetime) -> str:
    """Return the document filename for an export taken at ``exported_at``."""
    return f"conversation-{filename_stamp(exported_at)}.md"


def collect_image_assets(transcript: Transcript) -> list[ImageAsset]:
    """List every image in the transcript with its export filename."""
    return [
        ImageAsset(filename=image_filename(turn, index), data_url=data_url)
        for turn in transcript.all()
        for index, data_url in enumerate(turn.images, start=1)
    ]


def _citation_line(citation: Citation) -> str:
    label = citation.title or citation.url
    return f"- [{label}]({citation.url})"


def _render_turn(turn: ChatTurn, *, text_only: bool) -> list[str]:
    lines = [f"## {ROLE_HEADINGS.get(turn.role, turn.role.title())}", ""]
    lines.extend([turn.text or NO_TEXT_PLACEHOLDER, ""])

    if turn.images and not text_only:
        lines.extend(["### Images", ""])
        for index in range(1, len(turn.images) + 1):
            lines.append(f"![Image {index}]({image_filename(turn, index)})")
        lines.append("")

    if turn.citations:
        lines.extend(["### Sources", ""])
        lines.extend(_citation_line(citation) for citation in turn.citations)
        lines.append("")

    return lines


def export_markdown(
    transcript: Transcript,
    *,
    exported_at: datetime | None = None,
    text_only: bool = False,
) -> str:
    """Serialize a transcript to a Markdown document.

    Args:
        transcript: Conversation to export.
        exported_at: Time written to the ``Exported:`` line; defaults to now.
        text_only: Omit the image subsections.

    Returns:
        The document text. Apart from the ``Exported:`` line the output depends
        only on the transcript.

    """
    moment = exported_at or utc_now()
    lines = [f"# {EXPORT_TITLE}", "", f"Exported: {iso_timestamp(moment)}", ""]
    for turn in transcript.all():
        lines.extend(_render_turn(turn, text_only=text_only))
    return "\n".join(lines)


def write_export(
    transcript: Transcript,
    directory: Path,
    *,
    exported_at: datetime | None = None,
    text_only: bool = False,
) -> Path:
    """Write the Markdown export and decoded image files into ``directory``.

    Images whose data URL cannot be decoded are referenced in the document
    but not written.

    Returns:
        Path of the written Markdown file.

    """
    moment = exported_at or utc_now()
    directory.mkdir(parents=True, exist_ok=True)

    document_path = directory / export_filename(moment)
    document_path.write_text(
        export_markdown(transcript, exported_at=moment, text_only=text_only),
        encoding="utf-8",
    )

    if text_only:
        return document_path

    for asset in collect_image_assets(transcript):
        decoded = parse_data_url(asset.data_url)
        if decoded is None:
            logger.warning("Skipping undecodable image %s", asset.filename)
            continue
        (directory / asset.filename).write_bytes(decoded.data)

    logger.info("Exported transcript to %s", document_path)
    return document_path
