"""Run verification endpoint."""

from fastapi import APIRouter, Depends

from snake_arena.core.errors import ArenaError
from snake_arena.schemas.attestation import (
    ScorePayloadSchema,
    VerifyRunRequest,
    VerifyRunResponse,
)

from ..dependencies import AttestationServiceDep, http_error, rate_limited

router = APIRouter(tags=["attestation"])


@router.post(
    "/verify-run",
    response_model=VerifyRunResponse,
    dependencies=[Depends(rate_limited("verify"))],
)
def verify_run(
    request: VerifyRunRequest,
    attester: AttestationServiceDep,
) -> VerifyRunResponse:
    """Replay a finished run, validate its heartbeats and sign the canonical score.

    Rejections carry a reason code and diagnostics and never include a signature.
    """
    try:
        attestation = attester.verify_run(
            session_id=request.session_id,
            player=request.player,
            content_hash=request.content_hash,
            inputs=[event.to_event() for event in request.inputs],
            heartbeats=[beat.to_heartbeat() for beat in request.heartbeats],
            claimed_score=request.score,
        )
    except ArenaError as err:
        raise http_error(err) from err

    return VerifyRunResponse(
        payload=ScorePayloadSchema.from_payload(attestation.payload),
        cadence_digest=attestation.cadence_digest,
        signature=attestation.signature,
        score=attestation.score,
    )
