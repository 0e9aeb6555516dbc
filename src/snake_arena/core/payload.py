"""The attested score tuple shared by the attester and the run ledger."""
from __future__ import annotations

from dataclasses import asdict, dataclass

from snake_arena.utils.hash import Hasher, blake3_digest, canonical_json


@dataclass(frozen=True)
class ScorePayload:
    """Exactly the fields covered by the attestation signature."""

    player: str
    session_id: str
    score: int
    content_hash: str
    cadence_digest: str

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

    def digest(self, hash_fn: Hasher = blake3_digest) -> bytes:
        """Return the bytes the attester signs and the ledger verifies.

        Both sides must pass the same ``hash_fn``, normally the crypto
        provider's ``hash``.
        """
        return hash_fn(canonical_json(self.to_dict()))
