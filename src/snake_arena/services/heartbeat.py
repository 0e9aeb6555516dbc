"""Signed heartbeat receipts for live sessions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from snake_arena.core.cadence import Heartbeat, heartbeat_message
from snake_arena.core.errors import CadenceError
from snake_arena.services.crypto import CryptoProvider, get_crypto
from snake_arena.services.sessions import GameSession, SessionService, get_session_service

logger = logging.getLogger(__name__)

MillisecondClock = Callable[[], int]


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class HeartbeatSigner:
    """Timestamps and signs client pings against a live session."""

    def __init__(
        self,
        sessions: SessionService,
        crypto: CryptoProvider,
        clock_ms: MillisecondClock = now_ms,
    ) -> None:
        self._sessions = sessions
        self._crypto = crypto
        self._clock_ms = clock_ms

    def issue(self, session_id: str, index: int) -> Heartbeat:
        """Record heartbeat ``index`` for a session and return its signed receipt.

        The receipt timestamp is taken inside the session's critical section,
        so indices and timestamps in the stored log are strictly increasing.

        Raises:
            SessionError: If the session is unknown or expired.
            CadenceError: If ``index`` does not exceed the last recorded index.
        """

        def build(session: GameSession) -> Heartbeat:
            last = session.last_heartbeat
            if last is not None and index <= last.index:
                raise CadenceError("stale heartbeat", last_index=last.index, index=index)
            timestamp = self._clock_ms()
            if last is not None and timestamp <= last.timestamp:
                timestamp = last.timestamp + 1
            message = heartbeat_message(session_id, index, timestamp, self._crypto.hash)
            signature = self._crypto.sign(message)
            return Heartbeat(index=index, timestamp=timestamp, signature=signature)

        beat = self._sessions.store.append_heartbeat(session_id, build)
        logger.debug("Heartbeat %d for session %s at %d", beat.index, session_id, beat.timestamp)
        return beat


def get_heartbeat_signer() -> HeartbeatSigner:
    """Return a heartbeat signer bound to the shared store and attester key."""
    return HeartbeatSigner(get_session_service(), get_crypto())
