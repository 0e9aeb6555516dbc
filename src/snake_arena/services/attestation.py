"""Run verification and attestation signing."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from snake_arena.core import cadence
from snake_arena.core.cadence import CadenceConfig, Heartbeat
from snake_arena.core.errors import CadenceError, IdentityMismatch, ReplayMismatch
from snake_arena.core.payload import ScorePayload
from snake_arena.core.replay import InputEvent, replay
from snake_arena.core.settings import settings
from snake_arena.services.crypto import CryptoProvider, get_crypto
from snake_arena.services.sessions import SessionService, get_session_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attestation:
    """A signed score payload returned to the client."""

    payload: ScorePayload
    signature: str

    @property
    def score(self) -> int:
        return self.payload.score

    @property
    def cadence_digest(self) -> str:
        return self.payload.cadence_digest


def cadence_config_from_settings() -> CadenceConfig:
    """Build the cadence bounds from configuration."""
    return CadenceConfig(
        min_beats=settings.hb_min_beats,
        min_interval_ms=settings.hb_min_ms,
        max_interval_ms=settings.hb_max_ms,
        require_signatures=not settings.hb_allow_unsigned,
    )


class AttestationService:
    """Replays a finished run, checks its cadence and signs the result."""

    def __init__(
        self,
        sessions: SessionService,
        crypto: CryptoProvider,
        config: CadenceConfig | None = None,
    ) -> None:
        self._sessions = sessions
        self._crypto = crypto
        self._config = config or cadence_config_from_settings()

    @property
    def config(self) -> CadenceConfig:
        return self._config

    def verify_run(
        self,
        *,
        session_id: str,
        player: str,
        content_hash: str,
        inputs: Sequence[InputEvent],
        heartbeats: Sequence[Heartbeat],
        claimed_score: int | None = None,
    ) -> Attestation:
        """Verify a finished run and return its attestation.

        The attested score is always the replayed one; ``claimed_score`` is
        only compared for logging. On success the session is consumed.

        Raises:
            SessionError: Unknown or expired session.
            IdentityMismatch: ``player`` does not own the session.
            ReplayMismatch: The replayed content hash differs from ``content_hash``.
            CadenceError: The heartbeat log fails validation.
        """
        session = self._sessions.require(session_id)
        if session.owner != player:
            logger.warning(
                "verify-run reject: address mismatch (session=%s expected=%s got=%s)",
                session_id,
                session.owner,
                player,
            )
            raise IdentityMismatch("address mismatch", session_id=session_id)

        result = replay(session.seed, inputs)
        if result.content_hash != content_hash.lower():
            logger.warning(
                "verify-run reject: hash mismatch (session=%s claimed=%s replayed=%s)",
                session_id,
                content_hash,
                result.content_hash,
            )
            raise ReplayMismatch(
                "mismatch",
                content_hash=content_hash,
                replay_hash=result.content_hash,
            )
        if claimed_score is not None and claimed_score != result.score:
            logger.warning(
                "verify-run: claimed score %d differs from replay %d (session=%s)",
                claimed_score,
                result.score,
                session_id,
            )

        try:
            timing = cadence.validate(
                heartbeats, session_id, self._config, self._crypto.verify, self._crypto.hash
            )
        except CadenceError as err:
            logger.warning("verify-run reject: %s (session=%s)", err, session_id)
            raise

        payload = ScorePayload(
            player=session.owner,
            session_id=session_id,
            score=result.score,
            content_hash=result.content_hash,
            cadence_digest=timing.digest,
        )
        signature = self._crypto.sign(payload.digest(self._crypto.hash))
        self._sessions.consume(session_id)
        logger.info(
            "Attested session %s for %s with score %d", session_id, session.owner, result.score
        )
        return Attestation(payload=payload, signature=signature)


def get_attestation_service() -> AttestationService:
    """Return an attestation service bound to the shared store and attester key."""
    return AttestationService(get_session_service(), get_crypto())
