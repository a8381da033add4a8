"""Chat session state and the send state machine.

A send moves a session from idle to sending and back to idle in two steps:

- ``begin_send`` validates the session, appends the user turn right away and
  clears the pending prompt.
- ``complete_send`` appends the assistant turn for a decoded response, or
  records an error. The user turn is kept either way.

``ChatController.send`` runs both steps around the transport call. At most one
send is in flight per session; extra attempts are ignored, not queued.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from routerchat.core.config import IMAGE_MODALITIES, IMAGE_ONLY_PLACEHOLDER
from routerchat.core.error_handling import describe_error, log_exception
from routerchat.core.exceptions import (
    EMPTY_RESPONSE_MESSAGE,
    TRANSPORT_UNAVAILABLE_MESSAGE,
)
from routerchat.core.models import ChatTurn, ModelDescriptor
from routerchat.logic.responses import (
    CompletionMalformed,
    CompletionOk,
    CompletionResult,
    decode_completion,
)
from routerchat.logic.transcript import Transcript
from routerchat.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

ChatTransport = Callable[[str, dict[str, object]], Awaitable[object]]
Clock = Callable[[], datetime]


@dataclass(slots=True)
class ChatSession:
    """Interactive state owned by one chat window."""

    api_key: str = ""
    model: ModelDescriptor | None = None
    transcript: Transcript = field(default_factory=Transcript)
    prompt: str = ""
    is_sending: bool = False
    error: str | None = None


def build_request_messages(transcript: Transcript) -> list[dict[str, str]]:
    """Project the transcript to the minimal ``{role, content}`` history."""
    return [{"role": turn.role, "content": turn.text} for turn in transcript.all()]


class ChatController:
    """Run request/response cycles for a ``ChatSession``."""

    def __init__(
        self,
        transport: ChatTransport | None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        """Create a controller.

        Args:
            transport: Coroutine function taking ``(api_key, body)`` and
                returning the decoded response payload. None means the
                transport is unavailable.
            clock: Source of turn timestamps.

        """
        self._transport = transport
        self._clock = clock

    @staticmethod
    def can_send(session: ChatSession) -> bool:
        """Return True when a send may start for this session."""
        return (
            bool(session.prompt.strip())
            and bool(session.api_key.strip())
            and session.model is not None
            and not session.is_sending
        )

    def begin_send(self, session: ChatSession) -> ChatTurn | None:
        """Enter the sending state and append the user turn.

        Returns:
            The appended user turn, or None when the session cannot send.

        """
        if not self.can_send(session):
            return None

        session.is_sending = True
        session.error = None
        turn = ChatTurn(
            role="user",
            created_at=self._clock(),
            text=session.prompt.strip(),
        )
        session.transcript.append(turn)
        session.prompt = ""
        return turn

    @staticmethod
    def build_request(session: ChatSession) -> dict[str, object]:
        """Build the chat-completion request body for the current history."""
        if session.model is None:
            message = "Cannot build a request without a selected model"
            raise ValueError(message)

        body: dict[str, object] = {
            "model": session.model.id,
            "messages": build_request_messages(session.transcript),
        }
        if session.model.kind == "image":
            body["modalities"] = list(IMAGE_MODALITIES)
        return body

    def complete_send(
        self,
        session: ChatSession,
        result: CompletionResult | BaseException,
    ) -> ChatTurn | None:
        """Leave the sending state with a decoded result or a failure.

        Returns:
            The appended assistant turn, or None when the send failed.

        """
        session.is_sending = False

        if isinstance(result, BaseException):
            session.error = describe_error(result)
            return None
        if isinstance(result, CompletionMalformed):
            session.error = result.reason
            return None
        if result.is_empty():
            session.error = EMPTY_RESPONSE_MESSAGE
            return None

        turn = self._assistant_turn(result)
        session.transcript.append(turn)
        session.error = None
        return turn

    def _assistant_turn(self, result: CompletionOk) -> ChatTurn:
        text = result.text
        if not text and result.images:
            text = IMAGE_ONLY_PLACEHOLDER
        return ChatTurn(
            role="assistant",
            created_at=self._clock(),
            text=text,
            images=result.images,
            citations=result.citations,
        )

    async def send(self, session: ChatSession) -> bool:
        """Run one full send for ``session``.

        Returns:
            True when an assistant turn was appended. Failures never
            propagate; they are recorded on ``session.error``.

        """
        if not self.can_send(session):
            return False

        if self._transport is None:
            logger.warning("Send attempted without a chat transport")
            session.error = TRANSPORT_UNAVAILABLE_MESSAGE
            return False

        self.begin_send(session)
        body = self.build_request(session)

        try:
            payload = await self._transport(session.api_key, body)
        except Exception as exc:
            log_exception(
                logger=logger,
                message="Chat completion request failed",
                error=exc,
                context={"model": body["model"], "turns": len(session.transcript)},
            )
            self.complete_send(session, exc)
            return False

        result = decode_completion(payload)
        if isinstance(result, CompletionMalformed):
            logger.warning("Malformed chat completion payload: %s", result.reason)
        return self.complete_send(session, result) is not None
