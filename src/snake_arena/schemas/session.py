"""Session-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .common import PlayerId


class SessionCreate(BaseModel):
    """Request a new play session."""

    player: PlayerId


class SessionResponse(BaseModel):
    """Issued session id and replay seed."""

    session_id: str
    seed: str
    expires_at: float = Field(..., description="Expiry as epoch seconds")
