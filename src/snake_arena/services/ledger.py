"""Run ledger: paid attempts, attestation verification and leaderboard updates.

Each boundary call (`RunLedger.start_run`, `RunLedger.finalize`) runs under a
process-wide lock inside one database transaction. All preconditions are
checked before anything is written, and any failure rolls the transaction
back, so a rejected call never leaves a partial ledger or leaderboard change.
Across worker processes, `finalize` relies on row locks: the run record and
the board slots are read ``FOR UPDATE``. Two processes racing to fill the
same empty slot fail one transaction on the slot's primary key instead of
overwriting each other.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from snake_arena.core.errors import (
    AttestationError,
    IdentityMismatch,
    RunStateError,
    SessionError,
)
from snake_arena.core.payload import ScorePayload
from snake_arena.core.settings import settings
from snake_arena.models import LeaderboardSlot, PlayerStats, RunRecord
from snake_arena.services.crypto import CryptoProvider, get_crypto, trusted_attester_pubkey
from snake_arena.services.ranking import BoundedLeaderboard, RankedEntry

logger = logging.getLogger(__name__)

_LEDGER_LOCK = Lock()


def slot_query(for_update: bool = False) -> Select[tuple[LeaderboardSlot]]:
    """Return the board query in rank order.

    With ``for_update`` the slot rows stay locked until the transaction ends,
    so finalizations from separate worker processes sharing one database are
    serialised on the board. Backends without row locks (SQLite) ignore it.
    """
    query = select(LeaderboardSlot).order_by(LeaderboardSlot.position)
    return query.with_for_update() if for_update else query


@dataclass(frozen=True)
class FinalizeOutcome:
    """What a successful score submission did to the board."""

    session_id: str
    player: str
    score: int
    rank: int
    evicted: str | None = None


class RunLedger:
    """Records paid runs and accepts one attested score per run."""

    def __init__(
        self,
        db: Session,
        crypto: CryptoProvider,
        *,
        trusted_pubkey: str | None = None,
        entry_fee: int | None = None,
        capacity: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db = db
        self._crypto = crypto
        self._trusted_pubkey = trusted_pubkey or crypto.public_key_hex
        self._entry_fee = settings.entry_fee if entry_fee is None else entry_fee
        self._capacity = settings.leaderboard_capacity if capacity is None else capacity
        self._clock = clock

    @property
    def entry_fee(self) -> int:
        return self._entry_fee

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        with _LEDGER_LOCK:
            try:
                yield
                self._db.commit()
            except Exception:
                self._db.rollback()
                raise

    def _now(self) -> int:
        return int(self._clock())

    # --- Boundary calls -------------------------------------------------------------
    def start_run(self, session_id: str, caller: str, payment: int) -> RunRecord:
        """Open a paid run for ``session_id``.

        Raises:
            RunStateError: A run already exists for the session, or the payment
                differs from the entry fee.
        """
        with self._atomic():
            if self._db.get(RunRecord, session_id) is not None:
                raise RunStateError("run exists", session_id=session_id)
            if payment != self._entry_fee:
                raise RunStateError("wrong entry fee", expected=self._entry_fee, got=payment)

            record = RunRecord(
                session_id=session_id,
                player=caller,
                entry_fee_paid=payment,
                finalized=False,
                started_at=self._now(),
            )
            self._db.add(record)
            self._db.flush()
        logger.info("Run started for session %s by %s", session_id, caller)
        return record

    def finalize(self, payload: ScorePayload, signature: str, caller: str) -> FinalizeOutcome:
        """Accept an attested score and fold it into the leaderboard.

        Raises:
            SessionError: No run exists for the payload's session.
            IdentityMismatch: The caller does not own the run or the payload.
            RunStateError: The run was already finalized.
            AttestationError: The signature does not verify against the trusted key.
        """
        with self._atomic():
            record = self._db.get(RunRecord, payload.session_id, with_for_update=True)
            if record is None:
                raise SessionError("unknown run", session_id=payload.session_id)
            if record.player != caller or payload.player != caller:
                raise IdentityMismatch(
                    "not run owner",
                    session_id=payload.session_id,
                    owner=record.player,
                    caller=caller,
                )
            if record.finalized:
                raise RunStateError("already finalized", session_id=payload.session_id)
            digest = payload.digest(self._crypto.hash)
            if not self._crypto.verify(digest, signature, self._trusted_pubkey):
                raise AttestationError("bad signature", session_id=payload.session_id)

            now = self._now()
            record.finalized = True
            record.finalized_at = now

            stats = self._stats_for_update(caller)
            stats.runs += 1
            stats.best_score = max(stats.best_score, payload.score)

            board = self._load_board(for_update=True)
            outcome = board.consider(
                RankedEntry(
                    player=caller,
                    score=payload.score,
                    session_id=payload.session_id,
                    updated_at=now,
                )
            )
            evicted_player: str | None = None
            if outcome.inserted:
                if outcome.evicted is not None:
                    evicted_player = outcome.evicted.player
                    self._stats_for_update(evicted_player).best_rank = 0
                    logger.info(
                        "Evicted %s (score %d) from the leaderboard",
                        evicted_player,
                        outcome.evicted.score,
                    )
                for player, rank in board.ranks().items():
                    self._stats_for_update(player).best_rank = rank
                self._store_board(board)
            self._db.flush()

        logger.info(
            "Finalized session %s for %s with score %d (rank %d)",
            payload.session_id,
            caller,
            payload.score,
            outcome.rank,
        )
        return FinalizeOutcome(
            session_id=payload.session_id,
            player=caller,
            score=payload.score,
            rank=outcome.rank,
            evicted=evicted_player,
        )

    # --- Reads ----------------------------------------------------------------------
    def leaderboard(self) -> list[RankedEntry]:
        """Return the current board in rank order."""
        return self._load_board().entries()

    def player_stats(self, player: str) -> PlayerStats:
        """Return a player's stats; unknown players read as all zeros."""
        stats = self._db.get(PlayerStats, player)
        if stats is None:
            return PlayerStats(player=player, best_score=0, runs=0, best_rank=0)
        return stats

    def get_run(self, session_id: str) -> RunRecord | None:
        return self._db.get(RunRecord, session_id)

    # --- Helpers --------------------------------------------------------------------
    def _stats_for_update(self, player: str) -> PlayerStats:
        stats = self._db.get(PlayerStats, player)
        if stats is None:
            stats = PlayerStats(player=player, best_score=0, runs=0, best_rank=0)
            self._db.add(stats)
            self._db.flush()
        return stats

    def _slots(self, for_update: bool = False) -> list[LeaderboardSlot]:
        return list(self._db.scalars(slot_query(for_update)))

    def _load_board(self, for_update: bool = False) -> BoundedLeaderboard:
        board = BoundedLeaderboard(self._capacity)
        for slot in self._slots(for_update):
            board.consider(
                RankedEntry(
                    player=slot.player,
                    score=slot.score,
                    session_id=slot.session_id,
                    updated_at=slot.updated_at,
                )
            )
        return board

    def _store_board(self, board: BoundedLeaderboard) -> None:
        existing = {slot.position: slot for slot in self._slots()}
        entries = board.entries()
        for position, entry in enumerate(entries):
            slot = existing.pop(position, None)
            if slot is None:
                slot = LeaderboardSlot(position=position)
                self._db.add(slot)
            slot.player = entry.player
            slot.score = entry.score
            slot.session_id = entry.session_id
            slot.updated_at = entry.updated_at
        for stale in existing.values():
            self._db.delete(stale)


def build_run_ledger(db: Session) -> RunLedger:
    """Return a ledger that trusts the configured attester key."""
    return RunLedger(db, get_crypto(), trusted_pubkey=trusted_attester_pubkey())
