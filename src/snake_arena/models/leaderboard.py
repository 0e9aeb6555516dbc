"""Persisted leaderboard slots."""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from snake_arena.db.session import Base


class LeaderboardSlot(Base):
    """One occupied slot of the bounded leaderboard, keyed by 0-based position."""

    __tablename__ = "leaderboard_slot"

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    player: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    score: Mapped[int] = mapped_column(BigInteger, nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
