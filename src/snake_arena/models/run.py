"""Run ledger records: one permanent row per paid attempt."""

from sqlalchemy import BigInteger, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from snake_arena.db.session import Base


class RunRecord(Base):
    """A paid play attempt keyed by its session id.

    ``finalized`` flips to True exactly once, when the first valid attested
    score for the session is accepted.
    """

    __tablename__ = "run_record"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    player: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entry_fee_paid: Mapped[int] = mapped_column(BigInteger, nullable=False)
    finalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    started_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    finalized_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
