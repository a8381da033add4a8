from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import httpx
import pytest

from routerchat.core.exceptions import (
    EMPTY_RESPONSE_MESSAGE,
    MALFORMED_RESPONSE_MESSAGE,
    TRANSPORT_UNAVAILABLE_MESSAGE,
)
from routerchat.core.models import ModelDescriptor
from routerchat.logic.responses import CompletionMalformed, CompletionOk
from routerchat.logic.session import ChatController, ChatSession
from routerchat.services.openrouter import OpenRouterAPIError

from ._fakes import PNG_DATA_URL, FakeTransport, completion_payload, url_annotation

Clock = Callable[[], datetime]


def test_begin_send_appends_trimmed_user_turn_and_clears_prompt(
    session: ChatSession,
    fixed_clock: Clock,
) -> None:
    session.prompt = "  what's the weather?  "
    controller = ChatController(FakeTransport(), clock=fixed_clock)

    turn = controller.begin_send(session)

    assert turn is not None
    assert turn.role == "user"
    assert turn.text == "what's the weather?"
    assert session.transcript.all() == (turn,)
    assert session.prompt == ""
    assert session.is_sending is True


@pytest.mark.parametrize(
    ("field", "value"),
    [("prompt", "   "), ("api_key", ""), ("model", None), ("is_sending", True)],
)
def test_begin_send_guards_are_silent(
    session: ChatSession,
    field: str,
    value: object,
) -> None:
    setattr(session, field, value)
    controller = ChatController(FakeTransport())

    assert controller.begin_send(session) is None
    assert len(session.transcript) == 0
    assert session.error is None


def test_build_request_projects_history(
    session: ChatSession,
    fixed_clock: Clock,
) -> None:
    controller = ChatController(FakeTransport(), clock=fixed_clock)
    controller.begin_send(session)
    controller.complete_send(session, CompletionOk(text="general kenobi"))
    session.prompt = "again"
    controller.begin_send(session)

    body = controller.build_request(session)

    assert body == {
        "model": "openai/gpt-5.2-chat",
        "messages": [
            {"role": "user", "content": "hello there"},
            {"role": "assistant", "content": "general kenobi"},
            {"role": "user", "content": "again"},
        ],
    }


def test_build_request_requests_image_modalities_for_image_models(
    session: ChatSession,
    image_model: ModelDescriptor,
) -> None:
    session.model = image_model
    controller = ChatController(FakeTransport())
    controller.begin_send(session)

    body = controller.build_request(session)

    assert body["model"] == "google/gemini-3-pro-image-preview"
    assert body["modalities"] == ["image", "text"]


def test_complete_send_uses_placeholder_for_image_only_response(
    session: ChatSession,
) -> None:
    controller = ChatController(FakeTransport())
    controller.begin_send(session)

    turn = controller.complete_send(session, CompletionOk(images=(PNG_DATA_URL,)))

    assert turn is not None
    assert turn.text == "(image generated)"
    assert turn.images == (PNG_DATA_URL,)
    assert session.is_sending is False


def test_complete_send_failure_keeps_user_turn(session: ChatSession) -> None:
    controller = ChatController(FakeTransport())
    controller.begin_send(session)

    turn = controller.complete_send(session, RuntimeError("boom"))

    assert turn is None
    assert session.error == "boom"
    assert [t.role for t in session.transcript] == ["user"]
    assert session.is_sending is False


def test_complete_send_malformed_and_empty_results_set_errors(
    session: ChatSession,
) -> None:
    controller = ChatController(FakeTransport())

    controller.begin_send(session)
    controller.complete_send(session, CompletionMalformed())
    assert session.error == MALFORMED_RESPONSE_MESSAGE

    session.prompt = "retry"
    controller.begin_send(session)
    assert session.error is None
    controller.complete_send(session, CompletionOk())
    assert session.error == EMPTY_RESPONSE_MESSAGE
    assert [t.role for t in session.transcript] == ["user", "user"]


@pytest.mark.asyncio
async def test_send_appends_assistant_turn_with_citations(
    session: ChatSession,
    fixed_clock: Clock,
) -> None:
    transport = FakeTransport(
        payload=completion_payload(
            [{"type": "text", "text": "It is sunny."}],
            annotations=[url_annotation("https://weather.example", "Weather")],
        ),
    )
    controller = ChatController(transport, clock=fixed_clock)

    assert await controller.send(session) is True

    user_turn, assistant_turn = session.transcript.all()
    assert user_turn.text == "hello there"
    assert assistant_turn.role == "assistant"
    assert assistant_turn.text == "It is sunny."
    assert [c.url for c in assistant_turn.citations] == ["https://weather.example"]
    assert assistant_turn.created_at > user_turn.created_at
    assert transport.calls == [
        (
            "sk-or-test",
            {
                "model": "openai/gpt-5.2-chat",
                "messages": [{"role": "user", "content": "hello there"}],
            },
        ),
    ]
    assert session.error is None
    assert session.is_sending is False


@pytest.mark.asyncio
async def test_send_collects_generated_images(
    session: ChatSession,
    image_model: ModelDescriptor,
) -> None:
    session.model = image_model
    transport = FakeTransport(payload=completion_payload(None, images=[PNG_DATA_URL]))

    assert await ChatController(transport).send(session) is True

    assistant_turn = session.transcript.all()[-1]
    assert assistant_turn.text == "(image generated)"
    assert assistant_turn.images == (PNG_DATA_URL,)
    assert transport.calls[0][1]["modalities"] == ["image", "text"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (
            OpenRouterAPIError("OpenRouter HTTP 401: No auth", status_code=401),
            "OpenRouter HTTP 401: No auth",
        ),
        (httpx.ConnectError("connection refused"), "connection refused"),
        (ValueError(), "ValueError"),
    ],
)
async def test_send_failure_is_caught_and_surfaced(
    session: ChatSession,
    error: BaseException,
    expected: str,
) -> None:
    controller = ChatController(FakeTransport(error=error))

    assert await controller.send(session) is False

    assert session.error == expected
    assert [t.role for t in session.transcript] == ["user"]
    assert session.is_sending is False


@pytest.mark.asyncio
async def test_send_malformed_payload_sets_error(session: ChatSession) -> None:
    controller = ChatController(FakeTransport(payload={"choices": []}))

    assert await controller.send(session) is False

    assert session.error == MALFORMED_RESPONSE_MESSAGE
    assert len(session.transcript) == 1


@pytest.mark.asyncio
async def test_send_without_transport_reports_and_skips_network(
    session: ChatSession,
) -> None:
    controller = ChatController(None)

    assert await controller.send(session) is False

    assert session.error == TRANSPORT_UNAVAILABLE_MESSAGE
    assert len(session.transcript) == 0
    assert session.prompt == "hello there"


@pytest.mark.asyncio
async def test_send_with_invalid_input_does_nothing(session: ChatSession) -> None:
    session.prompt = "   "
    transport = FakeTransport(payload=completion_payload("hi"))

    assert await ChatController(transport).send(session) is False

    assert transport.calls == []
    assert len(session.transcript) == 0
    assert session.error is None


@pytest.mark.asyncio
async def test_second_send_while_sending_is_ignored(session: ChatSession) -> None:
    transport = FakeTransport(
        payload=completion_payload("done"),
        gate=asyncio.Event(),
    )
    controller = ChatController(transport)

    first = asyncio.create_task(controller.send(session))
    await asyncio.sleep(0)
    assert session.is_sending is True

    session.prompt = "second message"
    assert await controller.send(session) is False
    assert len(transport.calls) == 1
    assert len(session.transcript) == 1
    assert session.prompt == "second message"

    assert transport.gate is not None
    transport.gate.set()
    assert await first is True
    assert [t.text for t in session.transcript] == ["hello there", "done"]


@pytest.mark.asyncio
async def test_unexpected_transport_error_is_caught_and_session_recovers(
    session: ChatSession,
) -> None:
    failing = ChatController(FakeTransport(error=httpx.InvalidURL("bad url")))

    assert await failing.send(session) is False

    assert session.error == "bad url"
    assert session.is_sending is False

    session.prompt = "try again"
    working = ChatController(FakeTransport(payload=completion_payload("recovered")))

    assert await working.send(session) is True
    assert session.error is None
    assert [t.text for t in session.transcript] == [
        "hello there",
        "try again",
        "recovered",
    ]
