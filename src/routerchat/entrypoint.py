"""Interactive terminal chat loop."""

from __future__ import annotations

import asyncio
import getpass
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from routerchat.core.catalog import default_model, find_model, load_catalog
from routerchat.core.config import (
    API_KEY_ENV_VARS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    first_env_value,
    get_config_or_default,
    get_float_setting,
    normalize_api_key,
)
from routerchat.logic.export import write_export
from routerchat.logic.session import ChatController, ChatSession
from routerchat.services.openrouter import OpenRouterClient

if TYPE_CHECKING:
    from routerchat.core.models import ChatTurn, ModelDescriptor

logger = logging.getLogger(__name__)

ReadLine = Callable[[str], Awaitable[str | None]]
Write = Callable[[str], None]

HELP_TEXT = """Commands:
  /models            list available models
  /model <id>        select a model
  /key               enter an OpenRouter API key
  /export [dir]      export the conversation as Markdown (with images)
  /export-text [dir] export the conversation without images
  /help              show this help
  /quit              exit"""


@dataclass(slots=True)
class ChatApp:
    """Terminal front end for a single chat session."""

    session: ChatSession
    controller: ChatController
    catalog: tuple[ModelDescriptor, ...]
    export_dir: Path
    write: Write = print

    def render_turn(self, turn: ChatTurn) -> None:
        """Print an assistant turn with its image count and sources."""
        self.write(f"assistant: {turn.text}")
        if turn.images:
            self.write(f"  [{len(turn.images)} image(s) attached; /export to save]")
        for index, citation in enumerate(turn.citations, start=1):
            self.write(f"  [{index}] {citation.title or citation.url} <{citation.url}>")

    def list_models(self) -> None:
        """Print the catalog, marking the selected model."""
        selected = self.session.model.id if self.session.model else None
        for model in self.catalog:
            marker = "*" if model.id == selected else " "
            self.write(f" {marker} {model.id}  ({model.label}, {model.kind})")

    def select_model(self, model_id: str) -> None:
        """Switch the session to another catalog model."""
        model = find_model(self.catalog, model_id.strip())
        if model is None:
            self.write(f"Unknown model: {model_id.strip() or '(none)'}")
            return
        self.session.model = model
        self.write(f"Model set to {model.label}")

    def export(self, argument: str, *, text_only: bool) -> None:
        """Write the transcript to disk."""
        if not len(self.session.transcript):
            self.write("Nothing to export yet.")
            return
        directory = Path(argument.strip()) if argument.strip() else self.export_dir
        try:
            path = write_export(
                self.session.transcript,
                directory,
                text_only=text_only,
            )
        except OSError as exc:
            logger.warning("Export failed: %s", exc)
            self.write(f"Export failed: {exc}")
            return
        self.write(f"Exported to {path}")

    async def submit(self, prompt: str) -> None:
        """Send a prompt and print the outcome."""
        self.session.prompt = prompt
        if not self.session.api_key:
            self.write("No API key set. Use /key first.")
            return
        if await self.controller.send(self.session):
            self.render_turn(self.session.transcript.all()[-1])
        elif self.session.error:
            self.write(f"Error: {self.session.error}")

    async def handle_line(self, line: str, read_line: ReadLine) -> bool:
        """Process one input line. Returns False when the loop should stop."""
        command, _, argument = line.strip().partition(" ")
        if command in {"/quit", "/exit"}:
            return False
        if command == "/help":
            self.write(HELP_TEXT)
        elif command == "/models":
            self.list_models()
        elif command == "/model":
            self.select_model(argument)
        elif command == "/key":
            key = await read_line("API key: ")
            self.session.api_key = normalize_api_key(key)
        elif command == "/export":
            self.export(argument, text_only=False)
        elif command == "/export-text":
            self.export(argument, text_only=True)
        elif line.strip():
            await self.submit(line)
        return True

    async def run(self, read_line: ReadLine) -> None:
        """Read and handle lines until EOF or ``/quit``."""
        model_label = self.session.model.label if self.session.model else "none"
        self.write(f"routerchat - model: {model_label}. Type /help for commands.")
        while True:
            line = await read_line("you: ")
            if line is None:
                break
            if not await self.handle_line(line, read_line):
                break


async def _read_line(prompt: str) -> str | None:
    reader = getpass.getpass if prompt.startswith("API key") else input
    try:
        return await asyncio.to_thread(reader, prompt)
    except EOFError:
        return None


def build_app(config: dict[str, Any], client: OpenRouterClient) -> ChatApp:
    """Assemble the session, controller and catalog from config."""
    catalog = load_catalog(config)
    session = ChatSession(
        api_key=normalize_api_key(first_env_value(API_KEY_ENV_VARS)),
        model=default_model(catalog, config),
    )
    export_dir = Path(str(config.get("export_dir") or "exports"))
    return ChatApp(
        session=session,
        controller=ChatController(client.complete),
        catalog=catalog,
        export_dir=export_dir,
    )


async def main() -> None:
    """Load configuration and run the chat loop."""
    load_dotenv()
    config = get_config_or_default()
    client = OpenRouterClient(
        timeout=get_float_setting(
            config,
            "request_timeout_seconds",
            DEFAULT_REQUEST_TIMEOUT_SECONDS,
        ),
    )
    try:
        app = build_app(config, client)
        await app.run(_read_line)
    finally:
        await client.aclose()
