"""Session and heartbeat endpoints."""

from fastapi import APIRouter, Depends, status

from snake_arena.core.errors import ArenaError
from snake_arena.schemas.heartbeat import HeartbeatReceipt, HeartbeatRequest
from snake_arena.schemas.session import SessionCreate, SessionResponse

from ..dependencies import HeartbeatSignerDep, SessionServiceDep, http_error, rate_limited

router = APIRouter(tags=["sessions"])


@router.post(
    "/session",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("session"))],
)
async def create_session(
    request: SessionCreate,
    sessions: SessionServiceDep,
) -> SessionResponse:
    """Issue a session id and replay seed for one play attempt."""
    session = sessions.create(request.player)
    return SessionResponse(
        session_id=session.session_id,
        seed=session.seed,
        expires_at=session.expires_at,
    )


@router.post(
    "/heartbeat",
    response_model=HeartbeatReceipt,
    dependencies=[Depends(rate_limited("heartbeat"))],
)
async def heartbeat(
    request: HeartbeatRequest,
    signer: HeartbeatSignerDep,
) -> HeartbeatReceipt:
    """Record a heartbeat and return its signed, timestamped receipt."""
    try:
        beat = signer.issue(request.session_id, request.index)
    except ArenaError as err:
        raise http_error(err) from err
    return HeartbeatReceipt.from_heartbeat(beat)
