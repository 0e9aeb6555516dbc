"""SQLAlchemy models for the run ledger."""

from .leaderboard import LeaderboardSlot
from .player import PlayerStats
from .run import RunRecord

__all__ = [
    "LeaderboardSlot",
    "PlayerStats",
    "RunRecord",
]
