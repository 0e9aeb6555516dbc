"""Domain errors raised by the attestation pipeline and the run ledger.

Every error carries a short machine-readable ``reason`` plus a dictionary of
diagnostic fields. Routers turn them into JSON error bodies; nothing in this
module knows about HTTP beyond the suggested status code.
"""

from __future__ import annotations

from typing import Any


class ArenaError(RuntimeError):
    """Base exception for rejected arena operations."""

    status_code: int = 400

    def __init__(self, reason: str, **details: Any) -> None:
        super().__init__(reason)
        self.reason = reason
        self.details = details

    def to_detail(self) -> dict[str, Any]:
        """Return the error body sent to clients."""
        return {"error": self.reason, **self.details}


class SessionError(ArenaError):
    """Raised when a session or run record is unknown or expired."""

    status_code = 404


class IdentityMismatch(ArenaError):
    """Raised when the caller does not own the session or run."""

    status_code = 403


class ReplayMismatch(ArenaError):
    """Raised when the replayed transcript hash differs from the claimed one."""

    status_code = 403


class CadenceError(ArenaError):
    """Raised when a heartbeat log fails the cadence checks."""

    status_code = 403


class AttestationError(ArenaError):
    """Raised when an attestation signature does not verify against the trusted key."""

    status_code = 403


class SessionBusy(ArenaError):
    """Raised when a session stays locked by another request past the wait limit."""

    status_code = 503


class RunStateError(ArenaError):
    """Raised on run lifecycle violations (duplicate start, re-finalisation, bad fee)."""

    status_code = 409


__all__ = [
    "ArenaError",
    "AttestationError",
    "CadenceError",
    "IdentityMismatch",
    "ReplayMismatch",
    "RunStateError",
    "SessionBusy",
    "SessionError",
]
