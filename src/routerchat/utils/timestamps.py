"""Timestamp helpers shared by export and the smoke harness."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def iso_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with millisecond precision.

    Naive datetimes are treated as UTC.

    Examples:
        >>> iso_timestamp(datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))
        '2026-01-02T03:04:05.000Z'

    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    utc_moment = moment.astimezone(UTC)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filename_stamp(moment: datetime) -> str:
    """Format a datetime for use inside a filename (no ``:`` characters)."""
    return iso_timestamp(moment).replace(":", "-")
