"""Deterministic Snake replay.

Recomputes the outcome of a run from the server-issued seed and the client's
input transcript. Everything here is pure: the same seed and the same
(frame-sorted) event list always produce the same score and content hash, in
this implementation and in the browser client that shares these constants.
"""
from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import islice

from snake_arena.utils.hash import digest_json

GRID_SIZE = 20
START_POSITION = (5, 10)
START_DIRECTION = (1, 0)
START_FOOD = (10, 10)
MAX_FRAMES = 10_000

_MASK32 = 0xFFFFFFFF
_SEED_CHUNK_HEX = 8
_MULBERRY_INCREMENT = 0x6D2B79F5
_UINT32_RANGE = 4294967296


@dataclass(frozen=True)
class Direction:
    """Unit step applied to the head each frame."""

    x: int
    y: int

    def is_reverse_of(self, other: Direction) -> bool:
        return self.x == -other.x and self.y == -other.y


@dataclass(frozen=True)
class InputEvent:
    """A direction change requested at a given frame."""

    frame: int
    direction: Direction

    def __post_init__(self) -> None:
        if self.frame < 0:
            raise ValueError("input frame must be non-negative")

    def to_wire(self) -> dict[str, object]:
        """Return the transcript encoding used for the content hash."""
        return {"f": self.frame, "d": {"x": self.direction.x, "y": self.direction.y}}


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of a replay."""

    score: int
    content_hash: str
    frames: int


class SeededRandom:
    """mulberry32 generator seeded from a hex seed string.

    The seed's hex digits are XOR-folded in 8-digit chunks into the 32-bit
    starting state.
    """

    def __init__(self, seed_hex: str) -> None:
        self._state = fold_seed(seed_hex)

    def random(self) -> float:
        """Return the next value in ``[0, 1)``."""
        self._state = (self._state + _MULBERRY_INCREMENT) & _MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), 1 | t)
        r ^= (r + _imul(r ^ (r >> 7), 61 | r)) & _MASK32
        return ((r ^ (r >> 14)) & _MASK32) / _UINT32_RANGE


def fold_seed(seed_hex: str) -> int:
    """Fold a hex seed into a 32-bit state."""
    digits = seed_hex.lower().removeprefix("0x")
    state = 0
    for start in range(0, len(digits), _SEED_CHUNK_HEX):
        state ^= int(digits[start:start + _SEED_CHUNK_HEX], 16) & _MASK32
    return state


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def normalize_events(events: Iterable[InputEvent]) -> list[InputEvent]:
    """Return events stably sorted by frame index."""
    return sorted(events, key=lambda event: event.frame)


def transcript_hash(events: Iterable[InputEvent]) -> str:
    """Return the content hash of an input transcript.

    The hash covers the frame-sorted events only, never the score.
    """
    return digest_json([event.to_wire() for event in normalize_events(events)])


def _collides(head: tuple[int, int], body: deque[tuple[int, int]]) -> bool:
    x, y = head
    if x < 0 or y < 0 or x >= GRID_SIZE or y >= GRID_SIZE:
        return True
    return any(segment == head for segment in islice(body, 1, None))


def replay(seed_hex: str, events: Sequence[InputEvent]) -> ReplayResult:
    """Replay a run and return its canonical score and content hash.

    Args:
        seed_hex: Session seed as issued by the server (optionally ``0x``-prefixed).
        events: Input transcript in any order.

    Returns:
        A `ReplayResult` with the recomputed score, the transcript hash and the
        number of frames simulated.
    """
    ordered = normalize_events(events)
    rng = SeededRandom(seed_hex)
    body: deque[tuple[int, int]] = deque([START_POSITION])
    heading = Direction(*START_DIRECTION)
    food = START_FOOD
    score = 0
    frame = 0
    cursor = 0

    while True:
        while cursor < len(ordered) and ordered[cursor].frame == frame:
            requested = ordered[cursor].direction
            # 180 degree turns are illegal and silently dropped.
            if not requested.is_reverse_of(heading):
                heading = requested
            cursor += 1

        frame += 1
        head = (body[0][0] + heading.x, body[0][1] + heading.y)
        if _collides(head, body):
            break

        body.appendleft(head)
        if head == food:
            score += 1
            food = (
                math.floor(rng.random() * GRID_SIZE),
                math.floor(rng.random() * GRID_SIZE),
            )
        else:
            body.pop()

        if frame > MAX_FRAMES:
            break

    return ReplayResult(score=score, content_hash=transcript_hash(ordered), frames=frame)
