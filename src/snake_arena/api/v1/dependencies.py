"""Shared API dependencies for services, rate limits and error translation."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from snake_arena.core.errors import ArenaError
from snake_arena.core.settings import settings
from snake_arena.db.session import get_db
from snake_arena.services.attestation import AttestationService, get_attestation_service
from snake_arena.services.heartbeat import HeartbeatSigner, get_heartbeat_signer
from snake_arena.services.ledger import RunLedger, build_run_ledger
from snake_arena.services.rate_limit import RateLimiter, get_rate_limiter
from snake_arena.services.sessions import SessionService, get_session_service

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_run_ledger(db: SessionDep) -> RunLedger:
    """Return a run ledger bound to the request's database session."""
    return build_run_ledger(db)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
HeartbeatSignerDep = Annotated[HeartbeatSigner, Depends(get_heartbeat_signer)]
AttestationServiceDep = Annotated[AttestationService, Depends(get_attestation_service)]
RunLedgerDep = Annotated[RunLedger, Depends(get_run_ledger)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


def rate_limited(operation: str) -> Callable[[Request, RateLimiter], None]:
    """Build a dependency enforcing the per-origin ceiling for ``operation``.

    Args:
        operation: Key into `Settings.rate_limits` ("session", "heartbeat" or "verify").

    Returns:
        A FastAPI dependency raising HTTP 429 once the caller exceeds the ceiling.
    """

    def _enforce(request: Request, limiter: RateLimiterDep) -> None:
        if not settings.rate_limit_enabled:
            return
        origin = request.client.host if request.client else "unknown"
        if not limiter.hit(operation, origin):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={"error": "rate limited", "operation": operation},
            )

    return _enforce


def http_error(err: ArenaError) -> HTTPException:
    """Translate a domain rejection into an HTTP error with its diagnostics."""
    return HTTPException(status_code=err.status_code, detail=err.to_detail())
