from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from routerchat.utils.timestamps import filename_stamp, iso_timestamp, utc_now


def test_iso_timestamp_uses_utc_with_milliseconds() -> None:
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2026, 5, 6, 9, 8, 7, 123456, tzinfo=plus_two)

    assert iso_timestamp(moment) == "2026-05-06T07:08:07.123Z"


def test_naive_datetimes_are_treated_as_utc() -> None:
    assert iso_timestamp(datetime(2026, 1, 1)) == "2026-01-01T00:00:00.000Z"


def test_filename_stamp_has_no_colons() -> None:
    stamp = filename_stamp(datetime(2026, 1, 1, 12, 30, tzinfo=UTC))

    assert stamp == "2026-01-01T12-30-00.000Z"


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is UTC
