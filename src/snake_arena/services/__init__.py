"""Business logic services for the Snake Arena application."""

from .attestation import AttestationService
from .crypto import Ed25519Crypto
from .heartbeat import HeartbeatSigner
from .ledger import RunLedger
from .ranking import BoundedLeaderboard
from .rate_limit import RateLimiter
from .sessions import InMemorySessionStore, RedisSessionStore, SessionService

__all__ = [
    "AttestationService",
    "BoundedLeaderboard",
    "Ed25519Crypto",
    "HeartbeatSigner",
    "InMemorySessionStore",
    "RateLimiter",
    "RedisSessionStore",
    "RunLedger",
    "SessionService",
]
