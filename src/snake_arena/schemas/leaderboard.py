"""Leaderboard and player statistics schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LeaderboardEntryResponse(BaseModel):
    """A ranked leaderboard slot."""

    rank: int
    player: str
    score: int
    session_id: str
    updated_at: int


class PlayerStatsResponse(BaseModel):
    """Aggregate statistics for one player."""

    player: str
    best_score: int
    runs: int
    best_rank: int

    model_config = ConfigDict(from_attributes=True)
