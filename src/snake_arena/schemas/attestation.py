"""Run verification and attested payload schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from snake_arena.core.payload import ScorePayload
from snake_arena.core.cadence import MAX_BEATS
from snake_arena.core.replay import MAX_FRAMES, Direction, InputEvent

from .common import Hex64, PlayerId
from .heartbeat import HeartbeatReceipt


class DirectionIn(BaseModel):
    """Unit direction vector."""

    x: int = Field(..., ge=-1, le=1)
    y: int = Field(..., ge=-1, le=1)


class InputEventIn(BaseModel):
    """Direction change recorded at a frame.

    Uses the compact wire names ``f`` and ``d`` emitted by the game client.
    """

    model_config = ConfigDict(populate_by_name=True)

    frame: int = Field(..., ge=0, alias="f")
    direction: DirectionIn = Field(..., alias="d")

    def to_event(self) -> InputEvent:
        return InputEvent(
            frame=self.frame,
            direction=Direction(x=self.direction.x, y=self.direction.y),
        )


class ScorePayloadSchema(BaseModel):
    """The tuple covered by an attestation signature."""

    player: PlayerId
    session_id: Hex64
    score: int = Field(..., ge=0)
    content_hash: Hex64
    cadence_digest: Hex64

    @classmethod
    def from_payload(cls, payload: ScorePayload) -> ScorePayloadSchema:
        return cls(**payload.to_dict())

    def to_payload(self) -> ScorePayload:
        return ScorePayload(
            player=self.player,
            session_id=self.session_id,
            score=self.score,
            content_hash=self.content_hash,
            cadence_digest=self.cadence_digest,
        )


class VerifyRunRequest(BaseModel):
    """A finished run submitted for attestation."""

    session_id: Hex64
    player: PlayerId
    score: int | None = Field(None, ge=0, description="Advisory; never trusted")
    content_hash: Hex64
    inputs: list[InputEventIn] = Field(default_factory=list, max_length=MAX_FRAMES + 1)
    heartbeats: list[HeartbeatReceipt] = Field(default_factory=list, max_length=MAX_BEATS)


class VerifyRunResponse(BaseModel):
    """Attested payload plus signature for forwarding to the run ledger."""

    payload: ScorePayloadSchema
    cadence_digest: str
    signature: str
    score: int
