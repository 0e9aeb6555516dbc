"""Bounded leaderboard ranking.

The board is a fixed-capacity array ordered by score (descending) and then by
last-updated time (descending, so the more recent of two equal scores ranks
higher). Insertions bubble the candidate upward by swapping adjacent slots;
when full, the candidate can only displace the last slot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

LEADERBOARD_CAPACITY = 25


@dataclass(frozen=True)
class RankedEntry:
    """One result occupying a leaderboard slot."""

    player: str
    score: int
    session_id: str
    updated_at: int


@dataclass(frozen=True)
class ConsiderOutcome:
    """Result of offering an entry to the board.

    ``position`` is the 0-based slot the entry landed in when inserted.
    """

    inserted: bool
    position: int | None = None
    evicted: RankedEntry | None = None

    @property
    def rank(self) -> int:
        return 0 if self.position is None else self.position + 1


def outranks(candidate: RankedEntry, other: RankedEntry) -> bool:
    """Return True if ``candidate`` belongs strictly above ``other``."""
    if candidate.score != other.score:
        return candidate.score > other.score
    return candidate.updated_at > other.updated_at


class BoundedLeaderboard:
    """Fixed-capacity ordered array of the best individual results."""

    def __init__(
        self,
        capacity: int = LEADERBOARD_CAPACITY,
        entries: Iterable[RankedEntry] = (),
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._slots: list[RankedEntry | None] = [None] * capacity
        self._size = 0
        for entry in entries:
            self.consider(entry)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def entries(self) -> list[RankedEntry]:
        """Return the occupied slots in rank order."""
        return [entry for entry in self._slots[: self._size] if entry is not None]

    def minimum(self) -> RankedEntry | None:
        return self._slots[self._size - 1] if self._size else None

    def consider(self, entry: RankedEntry) -> ConsiderOutcome:
        """Offer ``entry`` to the board.

        Below capacity the entry is always appended. At capacity it replaces
        the last slot only if it strictly outranks the current minimum.
        """
        if self._size < self._capacity:
            position = self._size
            self._slots[position] = entry
            self._size += 1
            return ConsiderOutcome(inserted=True, position=self._bubble_up(position))

        last = self._size - 1
        minimum = self._slots[last]
        assert minimum is not None
        if not outranks(entry, minimum):
            return ConsiderOutcome(inserted=False)

        self._slots[last] = entry
        return ConsiderOutcome(inserted=True, position=self._bubble_up(last), evicted=minimum)

    def ranks(self) -> dict[str, int]:
        """Return each listed player's best (smallest) 1-based rank in one pass."""
        best: dict[str, int] = {}
        for position, entry in enumerate(self.entries()):
            best.setdefault(entry.player, position + 1)
        return best

    def _bubble_up(self, position: int) -> int:
        slots = self._slots
        while position > 0:
            above = slots[position - 1]
            current = slots[position]
            assert above is not None and current is not None
            if not outranks(current, above):
                break
            slots[position - 1], slots[position] = current, above
            position -= 1
        return position
