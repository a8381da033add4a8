from __future__ import annotations

import pytest

from routerchat.logic.responses import (
    CompletionMalformed,
    CompletionOk,
    decode_completion,
)

from ._fakes import PNG_DATA_URL, completion_payload, url_annotation


def test_full_payload_decodes_to_ok() -> None:
    result = decode_completion(
        completion_payload(
            "See [A](https://a.example)",
            images=[PNG_DATA_URL],
            annotations=[url_annotation("https://b.example")],
        ),
    )

    assert isinstance(result, CompletionOk)
    assert result.text == "See [A](https://a.example)"
    assert result.images == (PNG_DATA_URL,)
    assert [c.url for c in result.citations] == ["https://b.example"]


def test_partial_message_degrades_to_empty_fields() -> None:
    result = decode_completion(
        {"choices": [{"message": {"images": "bad", "annotations": {"x": 1}}}]},
    )

    assert result == CompletionOk()
    assert isinstance(result, CompletionOk)
    assert result.is_empty()


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "text",
        {},
        {"choices": []},
        {"choices": "nope"},
        {"choices": [None]},
        {"choices": [{"message": "text"}]},
    ],
)
def test_payload_without_message_is_malformed(payload: object) -> None:
    assert isinstance(decode_completion(payload), CompletionMalformed)
