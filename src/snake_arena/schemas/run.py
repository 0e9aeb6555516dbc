"""Run ledger request/response schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .attestation import ScorePayloadSchema
from .common import Hex64, PlayerId


class RunStart(BaseModel):
    """Open a paid run for a session."""

    session_id: Hex64
    player: PlayerId
    payment: int = Field(..., ge=0, description="Amount paid, must equal the entry fee")
    signature: str = Field(..., description="Caller signature over the run-start message")


class RunResponse(BaseModel):
    """Ledger view of a run."""

    session_id: str
    player: str
    entry_fee_paid: int
    finalized: bool

    model_config = ConfigDict(from_attributes=True)


class ScoreSubmission(BaseModel):
    """Forward an attested payload to the ledger."""

    payload: ScorePayloadSchema
    attestation_signature: str
    caller: PlayerId
    caller_signature: str = Field(..., description="Caller signature over the run-submit message")


class ScoreSubmissionResponse(BaseModel):
    """Outcome of a finalized run."""

    session_id: str
    player: str
    score: int
    rank: int = Field(..., description="1-based leaderboard position, 0 if not ranked")
    evicted: str | None = None
