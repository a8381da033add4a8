"""Append-only conversation transcript."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from routerchat.core.models import ChatTurn

logger = logging.getLogger(__name__)


class Transcript:
    """Ordered history of turns for one chat session.

    Insertion order is chronological order and display order. Turns are
    never edited or removed once appended.
    """

    __slots__ = ("_turns",)

    def __init__(self) -> None:
        """Create an empty transcript."""
        self._turns: list[ChatTurn] = []

    def append(self, turn: ChatTurn) -> bool:
        """Append a turn unless it has neither text nor images.

        Returns:
            True when the turn was stored.

        """
        if turn.is_empty():
            logger.debug("Skipping empty %s turn", turn.role)
            return False
        self._turns.append(turn)
        return True

    def all(self) -> tuple[ChatTurn, ...]:
        """Return every turn in chronological order."""
        return tuple(self._turns)

    def has_any_images(self) -> bool:
        """Return True when any turn carries at least one image."""
        return any(turn.images for turn in self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ChatTurn]:
        return iter(tuple(self._turns))
