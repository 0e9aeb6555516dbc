"""Run ledger endpoints: paid run start and attested score submission."""

from fastapi import APIRouter, HTTPException, status

from snake_arena.core.errors import ArenaError, IdentityMismatch
from snake_arena.core.security import caller_message, verify_signature
from snake_arena.schemas.run import (
    RunResponse,
    RunStart,
    ScoreSubmission,
    ScoreSubmissionResponse,
)

from ..dependencies import RunLedgerDep, http_error

router = APIRouter(prefix="/runs", tags=["runs"])


def _require_caller(player: str, message: bytes, signature: str) -> None:
    if not verify_signature(player, message, signature):
        raise http_error(IdentityMismatch("bad caller signature", caller=player))


@router.post("", response_model=RunResponse, status_code=status.HTTP_201_CREATED)
async def start_run(request: RunStart, ledger: RunLedgerDep) -> RunResponse:
    """Open a paid run for a session; the payment must equal the entry fee."""
    _require_caller(
        request.player,
        caller_message("run-start", request.session_id, request.player, request.payment),
        request.signature,
    )
    try:
        record = ledger.start_run(request.session_id, request.player, request.payment)
    except ArenaError as err:
        raise http_error(err) from err
    return RunResponse.model_validate(record)


@router.post("/submit", response_model=ScoreSubmissionResponse)
async def submit_score(request: ScoreSubmission, ledger: RunLedgerDep) -> ScoreSubmissionResponse:
    """Finalize a run with an attested score and update the leaderboard."""
    _require_caller(
        request.caller,
        caller_message("run-submit", request.payload.session_id, request.caller),
        request.caller_signature,
    )
    try:
        outcome = ledger.finalize(
            request.payload.to_payload(),
            request.attestation_signature,
            request.caller,
        )
    except ArenaError as err:
        raise http_error(err) from err
    return ScoreSubmissionResponse(
        session_id=outcome.session_id,
        player=outcome.player,
        score=outcome.score,
        rank=outcome.rank,
        evicted=outcome.evicted,
    )


@router.get("/{session_id}", response_model=RunResponse)
async def get_run(session_id: str, ledger: RunLedgerDep) -> RunResponse:
    """Return the ledger record of a run."""
    record = ledger.get_run(session_id.lower().removeprefix("0x"))
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Run not found")
    return RunResponse.model_validate(record)
