"""Ephemeral game sessions.

A session is the server-issued context of one play attempt: an id, the seed
that drives food placement, the owning player and the heartbeat log. Sessions
live behind the `SessionStore` protocol so the in-process map used in
development and tests can be swapped for Redis without touching validation
code.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from threading import Lock
from typing import Any, Protocol

import redis
from redis.exceptions import LockError

from snake_arena.core.cadence import Heartbeat
from snake_arena.core.errors import SessionBusy, SessionError
from snake_arena.core.settings import settings

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32
SEED_BYTES = 32
_REDIS_LOCK_TIMEOUT_SECONDS = 5

Clock = Callable[[], float]
HeartbeatFactory = Callable[["GameSession"], Heartbeat]


@dataclass
class GameSession:
    """Server-side state of a single play attempt."""

    session_id: str
    seed: str
    owner: str
    created_at: float
    ttl_seconds: int
    heartbeats: list[Heartbeat] = field(default_factory=list)

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    @property
    def last_heartbeat(self) -> Heartbeat | None:
        return self.heartbeats[-1] if self.heartbeats else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "seed": self.seed,
            "owner": self.owner,
            "created_at": self.created_at,
            "ttl_seconds": self.ttl_seconds,
            "heartbeats": [
                {"i": beat.index, "t": beat.timestamp, "sig": beat.signature}
                for beat in self.heartbeats
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameSession:
        return cls(
            session_id=data["session_id"],
            seed=data["seed"],
            owner=data["owner"],
            created_at=float(data["created_at"]),
            ttl_seconds=int(data["ttl_seconds"]),
            heartbeats=[
                Heartbeat(index=int(beat["i"]), timestamp=int(beat["t"]), signature=beat["sig"])
                for beat in data.get("heartbeats", [])
            ],
        )


class SessionStore(Protocol):
    """Capability interface over the session backing store."""

    def get(self, session_id: str) -> GameSession | None: ...

    def set(self, session: GameSession) -> None: ...

    def append_heartbeat(self, session_id: str, factory: HeartbeatFactory) -> Heartbeat: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local session store with lazy expiry.

    Heartbeat appends take a per-session lock, so concurrent pings for one
    session are serialised while different sessions never contend.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._sessions: dict[str, GameSession] = {}
        self._session_locks: dict[str, Lock] = {}
        self._lock = Lock()

    def get(self, session_id: str) -> GameSession | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self._clock()):
                self._drop(session_id)
                return None
            return session

    def set(self, session: GameSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session
            self._session_locks.setdefault(session.session_id, Lock())

    def append_heartbeat(self, session_id: str, factory: HeartbeatFactory) -> Heartbeat:
        with self._lock:
            session_lock = self._session_locks.get(session_id)
        if session_lock is None:
            raise SessionError("bad session", session_id=session_id)

        with session_lock:
            session = self.get(session_id)
            if session is None:
                raise SessionError("bad session", session_id=session_id)
            beat = factory(session)
            session.heartbeats.append(beat)
            return beat

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._drop(session_id)

    def purge_expired(self) -> int:
        """Drop every expired session and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for session_id in expired:
                self._drop(session_id)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._session_locks.pop(session_id, None)


class RedisSessionStore:
    """Redis-backed session store; expiry is delegated to key TTLs."""

    def __init__(self, client: redis.Redis, clock: Clock = time.time) -> None:
        self._redis = client
        self._clock = clock

    @staticmethod
    def _key(session_id: str) -> str:
        return f"sess:{session_id}"

    def get(self, session_id: str) -> GameSession | None:
        raw = self._redis.get(self._key(session_id))
        if raw is None:
            return None
        return GameSession.from_dict(json.loads(raw))

    def set(self, session: GameSession) -> None:
        remaining = max(1, int(session.expires_at - self._clock()))
        self._redis.set(self._key(session.session_id), json.dumps(session.to_dict()), ex=remaining)

    def append_heartbeat(self, session_id: str, factory: HeartbeatFactory) -> Heartbeat:
        lock = self._redis.lock(
            f"lock:{self._key(session_id)}",
            timeout=_REDIS_LOCK_TIMEOUT_SECONDS,
            blocking_timeout=_REDIS_LOCK_TIMEOUT_SECONDS,
        )
        try:
            with lock:
                session = self.get(session_id)
                if session is None:
                    raise SessionError("bad session", session_id=session_id)
                beat = factory(session)
                session.heartbeats.append(beat)
                self._redis.set(
                    self._key(session_id),
                    json.dumps(session.to_dict()),
                    keepttl=True,
                )
                return beat
        except LockError as err:
            logger.warning("Heartbeat lock for session %s not acquired: %s", session_id, err)
            raise SessionBusy("session busy", session_id=session_id) from err

    def delete(self, session_id: str) -> None:
        self._redis.delete(self._key(session_id))

    def ping(self) -> bool:
        return bool(self._redis.ping())


class SessionService:
    """Issues sessions and resolves them for the heartbeat and attestation steps."""

    def __init__(
        self,
        store: SessionStore,
        ttl_seconds: int | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._store = store
        if ttl_seconds is None:
            ttl_seconds = settings.session_ttl_seconds
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def store(self) -> SessionStore:
        return self._store

    def create(self, owner: str) -> GameSession:
        """Open a new session for ``owner`` with a fresh id and seed."""
        if isinstance(self._store, InMemorySessionStore):
            self._store.purge_expired()
        session = GameSession(
            session_id=secrets.token_hex(SESSION_ID_BYTES),
            seed=secrets.token_hex(SEED_BYTES),
            owner=owner,
            created_at=self._clock(),
            ttl_seconds=self._ttl_seconds,
        )
        self._store.set(session)
        logger.info("Issued session %s for %s", session.session_id, owner)
        return session

    def require(self, session_id: str) -> GameSession:
        """Return a live session or raise `SessionError`."""
        session = self._store.get(session_id)
        if session is None:
            raise SessionError("bad session", session_id=session_id)
        return session

    def consume(self, session_id: str) -> None:
        """Destroy a session after its single successful attestation."""
        self._store.delete(session_id)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Return the process-wide session store selected by configuration."""
    if settings.redis_url:
        return RedisSessionStore(redis.from_url(settings.redis_url))
    return InMemorySessionStore()


def get_session_service() -> SessionService:
    """Return a session service bound to the shared store."""
    return SessionService(get_session_store())
