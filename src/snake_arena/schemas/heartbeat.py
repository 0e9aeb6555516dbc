"""Heartbeat Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from snake_arena.core.cadence import Heartbeat

from .common import Hex64


class HeartbeatRequest(BaseModel):
    """Periodic ping sent by the client while playing."""

    session_id: Hex64
    index: int = Field(..., ge=0, description="Strictly increasing per session")


class HeartbeatReceipt(BaseModel):
    """Signed receipt for a heartbeat; resubmitted verbatim at verification."""

    index: int = Field(..., ge=0)
    timestamp: int = Field(..., description="Receipt time in epoch milliseconds")
    signature: str = Field("", description="Hex Ed25519 signature over session|index|timestamp")

    @classmethod
    def from_heartbeat(cls, beat: Heartbeat) -> HeartbeatReceipt:
        return cls(index=beat.index, timestamp=beat.timestamp, signature=beat.signature)

    def to_heartbeat(self) -> Heartbeat:
        return Heartbeat(index=self.index, timestamp=self.timestamp, signature=self.signature)
