"""Per-player aggregate statistics."""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from snake_arena.db.session import Base


class PlayerStats(Base):
    """Best score, finalized run count and best current leaderboard rank.

    ``best_rank`` is 0 while the player holds no leaderboard slot.
    """

    __tablename__ = "player_stats"

    player: Mapped[str] = mapped_column(String(64), primary_key=True)
    best_score: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    runs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
