"""Leaderboard and player statistics endpoints."""

from fastapi import APIRouter

from snake_arena.core.security import normalize_identity
from snake_arena.schemas.leaderboard import LeaderboardEntryResponse, PlayerStatsResponse

from ..dependencies import RunLedgerDep

router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
async def get_leaderboard(ledger: RunLedgerDep) -> list[LeaderboardEntryResponse]:
    """Return the ranked board, best first."""
    return [
        LeaderboardEntryResponse(
            rank=position + 1,
            player=entry.player,
            score=entry.score,
            session_id=entry.session_id,
            updated_at=entry.updated_at,
        )
        for position, entry in enumerate(ledger.leaderboard())
    ]


@router.get("/players/{player}", response_model=PlayerStatsResponse)
async def get_player(player: str, ledger: RunLedgerDep) -> PlayerStatsResponse:
    """Return a player's best score, finalized run count and best rank (0 if unranked)."""
    return PlayerStatsResponse.model_validate(ledger.player_stats(normalize_identity(player)))
