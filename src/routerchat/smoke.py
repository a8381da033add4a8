"""Non-interactive OpenRouter smoke test.

Performs one text-model call (with the web plugin) and one image-model call,
then writes the raw responses and everything extracted from them into
``tests/out/openrouter-<timestamp>/``. Exits non-zero when either call fails.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
import traceback
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import httpx
from dotenv import dotenv_values

from routerchat.core.config import (
    API_KEY_ENV_VARS,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    IMAGE_MODALITIES,
    IMAGE_MODEL_ENV_VARS,
    TEXT_MODEL_ENV_VARS,
    first_env_value,
)
from routerchat.core.error_handling import (
    COMMON_HANDLER_EXCEPTIONS,
    configure_logging,
    install_global_exception_hooks,
    log_exception,
)
from routerchat.core.exceptions import MissingCredentialError
from routerchat.logic.citations import extract_web_citations
from routerchat.logic.content import extract_message_text
from routerchat.logic.images import (
    extension_for_mime,
    extract_response_images,
    parse_data_url,
)
from routerchat.logic.responses import first_choice_message
from routerchat.services.openrouter import OpenRouterClient
from routerchat.utils.timestamps import filename_stamp, iso_timestamp, utc_now

logger = logging.getLogger(__name__)

SmokeTransport = Callable[[str, dict[str, object]], Awaitable[object]]

SMOKE_EXCEPTIONS = (httpx.HTTPError, *COMMON_HANDLER_EXCEPTIONS)

TEXT_PROMPT = (
    "Use web search. What is the current weather in Madrid, Spain right now? "
    "Give 3 short bullets and include at least 2 citations as markdown links "
    "(e.g. [example.com](https://example.com/...))."
)
IMAGE_PROMPT = (
    "Generate a warm, cheerful illustration of a happy puppy greeting a family "
    "returning home from the beach. Golden-hour lighting, sandy footprints, "
    "beach towels and a surfboard near the doorway, friendly vibe. "
    "ONLY RETURN 1 IMAGE."
)
WEB_PLUGIN = {"id": "web", "max_results": 3}
SMOKE_APP_NAME = "routerchat (smoke test)"


@dataclass(frozen=True, slots=True)
class SmokeSettings:
    """Credentials and model choices for one smoke run."""

    api_key: str
    text_model: str
    image_model: str


@dataclass(slots=True)
class TextCallSummary:
    model: str
    ok: bool = False
    content_length: int = 0
    url_citations: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "model": self.model,
            "ok": self.ok,
            "contentLength": self.content_length,
            "urlCitations": self.url_citations,
        }


@dataclass(slots=True)
class ImageCallSummary:
    model: str
    ok: bool = False
    images: int = 0
    content_length: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "model": self.model,
            "ok": self.ok,
            "images": self.images,
            "contentLength": self.content_length,
        }


@dataclass(slots=True)
class SmokeSummary:
    """Aggregate outcome written to ``summary.json``."""

    started_at: datetime
    outputs_dir: str
    text: TextCallSummary
    image: ImageCallSummary
    saved_images: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.text.ok and self.image.ok

    def to_dict(self) -> dict[str, object]:
        return {
            "startedAt": iso_timestamp(self.started_at),
            "outputsDir": self.outputs_dir,
            "text": self.text.to_dict(),
            "image": self.image.to_dict(),
        }


def load_smoke_settings(
    root: Path,
    environ: Mapping[str, str] | None = None,
) -> SmokeSettings:
    """Resolve smoke settings from the environment and an optional ``.env``.

    Values already present in the environment win over the ``.env`` file.

    Raises:
        MissingCredentialError: No API key variable is set.

    """
    env = dict(os.environ if environ is None else environ)
    dotenv_path = root / ".env"
    if dotenv_path.is_file():
        file_values = {
            key: value
            for key, value in dotenv_values(dotenv_path).items()
            if value is not None
        }
        env = {**file_values, **{key: value for key, value in env.items() if value}}

    api_key = first_env_value(API_KEY_ENV_VARS, env)
    if not api_key:
        message = (
            "Missing OPENROUTER_API_KEY (or OPENROUTER_KEY / OPENROUTER_API_TOKEN) "
            "in environment/.env"
        )
        raise MissingCredentialError(message)

    return SmokeSettings(
        api_key=api_key,
        text_model=first_env_value(TEXT_MODEL_ENV_VARS, env) or DEFAULT_TEXT_MODEL,
        image_model=first_env_value(IMAGE_MODEL_ENV_VARS, env) or DEFAULT_IMAGE_MODEL,
    )


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _write_error(path: Path, error: BaseException) -> None:
    path.write_text(
        "".join(traceback.format_exception(error)),
        encoding="utf-8",
    )


async def _run_text_call(
    transport: SmokeTransport,
    settings: SmokeSettings,
    run_dir: Path,
    summary: TextCallSummary,
) -> None:
    body: dict[str, object] = {
        "model": settings.text_model,
        "plugins": [dict(WEB_PLUGIN)],
        "messages": [{"role": "user", "content": TEXT_PROMPT}],
    }
    payload = await transport(settings.api_key, body)
    _write_json(run_dir / "text-response.json", payload)

    message = first_choice_message(payload)
    content = extract_message_text(message)
    citations = extract_web_citations(message)

    summary.ok = True
    summary.content_length = len(content)
    summary.url_citations = len(citations)

    _write_json(
        run_dir / "text-web-citations.json",
        [citation.to_dict() for citation in citations],
    )
    (run_dir / "text-extracted.txt").write_text(
        f"{content}\n" if content else "",
        encoding="utf-8",
    )


async def _run_image_call(
    transport: SmokeTransport,
    settings: SmokeSettings,
    run_dir: Path,
    summary: ImageCallSummary,
) -> list[str]:
    body: dict[str, object] = {
        "model": settings.image_model,
        "messages": [{"role": "user", "content": IMAGE_PROMPT}],
        "modalities": list(IMAGE_MODALITIES),
    }
    payload = await transport(settings.api_key, body)
    _write_json(run_dir / "image-response.json", payload)

    message = first_choice_message(payload)
    content = extract_message_text(message)
    urls = extract_response_images(message)

    summary.ok = True
    summary.images = len(urls)
    summary.content_length = len(content)

    if content:
        (run_dir / "image-extracted.txt").write_text(f"{content}\n", encoding="utf-8")

    saved: list[str] = []
    for index, url in enumerate(urls, start=1):
        decoded = parse_data_url(url)
        if decoded is None:
            continue
        filename = f"image-{index}.{extension_for_mime(decoded.mime)}"
        (run_dir / filename).write_bytes(decoded.data)
        saved.append(filename)
    return saved


async def run_smoke(
    settings: SmokeSettings,
    transport: SmokeTransport,
    *,
    root: Path,
    started_at: datetime | None = None,
) -> SmokeSummary:
    """Run both smoke calls and persist their artifacts.

    Each call's failure is written to ``<call>-error.txt`` and recorded in the
    summary instead of being raised.
    """
    moment = started_at or utc_now()
    run_dir = root / "tests" / "out" / f"openrouter-{filename_stamp(moment)}"
    run_dir.mkdir(parents=True, exist_ok=True)

    summary = SmokeSummary(
        started_at=moment,
        outputs_dir=str(run_dir.relative_to(root)),
        text=TextCallSummary(model=settings.text_model),
        image=ImageCallSummary(model=settings.image_model),
    )

    try:
        await _run_text_call(transport, settings, run_dir, summary.text)
    except SMOKE_EXCEPTIONS as exc:
        summary.text.ok = False
        log_exception(logger=logger, message="Text smoke call failed", error=exc)
        _write_error(run_dir / "text-error.txt", exc)

    try:
        summary.saved_images = await _run_image_call(
            transport,
            settings,
            run_dir,
            summary.image,
        )
    except SMOKE_EXCEPTIONS as exc:
        summary.image.ok = False
        log_exception(logger=logger, message="Image smoke call failed", error=exc)
        _write_error(run_dir / "image-error.txt", exc)

    _write_json(run_dir / "summary.json", summary.to_dict())
    return summary


def _log_summary(summary: SmokeSummary) -> None:
    # No secrets, no base64.
    logger.info("OpenRouter smoke test complete")
    logger.info("Outputs: %s", summary.outputs_dir)
    logger.info(
        "Text: %s (%s) len=%s citations=%s",
        "OK" if summary.text.ok else "FAIL",
        summary.text.model,
        summary.text.content_length,
        summary.text.url_citations,
    )
    logger.info(
        "Image: %s (%s) images=%s len=%s",
        "OK" if summary.image.ok else "FAIL",
        summary.image.model,
        summary.image.images,
        summary.image.content_length,
    )


async def _amain(root: Path) -> int:
    settings = load_smoke_settings(root)
    client = OpenRouterClient(app_name=SMOKE_APP_NAME)
    try:
        summary = await run_smoke(settings, client.complete, root=root)
    finally:
        await client.aclose()
    _log_summary(summary)
    return 0 if summary.ok else 1


def main() -> None:
    """Console entry point for ``routerchat-smoke``."""
    configure_logging()
    install_global_exception_hooks()
    sys.exit(asyncio.run(_amain(Path.cwd())))


if __name__ == "__main__":
    main()
