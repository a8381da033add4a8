from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from routerchat.core.config import clear_config_cache
from routerchat.core.models import ModelDescriptor
from routerchat.logic.session import ChatSession

FIXED_START = datetime(2026, 3, 4, 5, 6, 7, 890000, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _reset_config_cache() -> Iterator[None]:
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that advances one second per call, starting at FIXED_START."""
    ticks = {"count": 0}

    def _clock() -> datetime:
        moment = FIXED_START + timedelta(seconds=ticks["count"])
        ticks["count"] += 1
        return moment

    return _clock


@pytest.fixture
def text_model() -> ModelDescriptor:
    return ModelDescriptor(id="openai/gpt-5.2-chat", label="GPT-5.2 Chat", kind="text")


@pytest.fixture
def image_model() -> ModelDescriptor:
    return ModelDescriptor(
        id="google/gemini-3-pro-image-preview",
        label="Gemini 3 Pro Image",
        kind="image",
    )


@pytest.fixture
def session(text_model: ModelDescriptor) -> ChatSession:
    return ChatSession(api_key="sk-or-test", model=text_model, prompt="hello there")
