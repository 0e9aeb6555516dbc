"""Heartbeat cadence validation.

A run is corroborated as real-time play by the heartbeats the client fetched
while playing. Each heartbeat is a server-signed receipt, so a valid log can
only be assembled by actually pinging the server at a human-plausible pace.
This is a heuristic, not a proof.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from snake_arena.core.errors import CadenceError
from snake_arena.utils.hash import Hasher, blake3_digest, digest_json

DEFAULT_MIN_BEATS = 3
DEFAULT_MIN_INTERVAL_MS = 150
DEFAULT_MAX_INTERVAL_MS = 1200
# An hour-long session pinging at the minimum interval.
MAX_BEATS = 24_000

SignatureCheck = Callable[[bytes, str], bool]


@dataclass(frozen=True)
class Heartbeat:
    """A signed heartbeat receipt."""

    index: int
    timestamp: int
    signature: str = ""


@dataclass(frozen=True)
class CadenceConfig:
    """Bounds applied to a heartbeat log. Intervals are inclusive milliseconds."""

    min_beats: int = DEFAULT_MIN_BEATS
    min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS
    max_interval_ms: int = DEFAULT_MAX_INTERVAL_MS
    require_signatures: bool = True


@dataclass(frozen=True)
class CadenceResult:
    """Accepted cadence: the interval list and its digest."""

    intervals: tuple[int, ...]
    digest: str


def heartbeat_message(
    session_id: str, index: int, timestamp: int, hash_fn: Hasher = blake3_digest
) -> bytes:
    """Return the bytes signed for a heartbeat receipt."""
    return hash_fn(f"{session_id}|{index}|{timestamp}".encode())


def cadence_digest(intervals: Sequence[int]) -> str:
    """Return the digest committing to an ordered interval list."""
    return digest_json(list(intervals))


def validate(
    heartbeats: Sequence[Heartbeat],
    session_id: str,
    config: CadenceConfig,
    verify: SignatureCheck | None = None,
    hash_fn: Hasher = blake3_digest,
) -> CadenceResult:
    """Validate a heartbeat log and return its cadence digest.

    Args:
        heartbeats: Heartbeats in submission order.
        session_id: Session the heartbeats were issued for.
        config: Cadence bounds.
        verify: Checks a signature over a message against the attester key;
            required when ``config.require_signatures`` is set.
        hash_fn: Digest applied to each receipt before its signature is checked;
            must match the one the heartbeat signer used.

    Raises:
        CadenceError: On too few beats, a bad signature, a non-monotonic
            index or timestamp, or an interval outside the configured bounds.
    """
    if len(heartbeats) < config.min_beats:
        raise CadenceError("too few beats", min=config.min_beats, saw=len(heartbeats))
    if config.require_signatures and verify is None:
        raise ValueError("signature check required when signatures are mandatory")

    intervals: list[int] = []
    last_index = -1
    last_timestamp: int | None = None

    for beat in heartbeats:
        if config.require_signatures:
            message = heartbeat_message(session_id, beat.index, beat.timestamp, hash_fn)
            if not beat.signature or not verify(message, beat.signature):  # type: ignore[misc]
                raise CadenceError("bad beat sig", index=beat.index)

        if beat.index <= last_index or (
            last_timestamp is not None and beat.timestamp <= last_timestamp
        ):
            raise CadenceError(
                "non-monotonic beats",
                last_index=last_index,
                last_timestamp=last_timestamp,
                index=beat.index,
                timestamp=beat.timestamp,
            )

        if last_timestamp is not None:
            delta = beat.timestamp - last_timestamp
            if delta < config.min_interval_ms or delta > config.max_interval_ms:
                raise CadenceError(
                    "bad cadence",
                    dt=delta,
                    min_ms=config.min_interval_ms,
                    max_ms=config.max_interval_ms,
                )
            intervals.append(delta)

        last_index = beat.index
        last_timestamp = beat.timestamp

    return CadenceResult(intervals=tuple(intervals), digest=cadence_digest(intervals))
