"""Tests for the run ledger boundary: paid starts, finalization and ranking."""

import pytest
from nacl.signing import SigningKey
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Session

from snake_arena.core.errors import (
    AttestationError,
    IdentityMismatch,
    RunStateError,
    SessionError,
)
from snake_arena.models import LeaderboardSlot, PlayerStats, RunRecord
from snake_arena.services.crypto import Ed25519Crypto
from snake_arena.services.ledger import RunLedger, slot_query
from tests.conftest import TEST_ENTRY_FEE, Sha256Crypto, StepClock, signed_payload

ALICE = "a1" * 32
BOB = "b2" * 32
CAROL = "c3" * 32


def sid(n: int) -> str:
    return f"{n:064x}"


def play(ledger: RunLedger, crypto: Ed25519Crypto, player: str, n: int, score: int):
    ledger.start_run(sid(n), player, TEST_ENTRY_FEE)
    payload, signature = signed_payload(crypto, player, sid(n), score)
    return ledger.finalize(payload, signature, player)


class TestStartRun:
    def test_records_paid_run(self, ledger: RunLedger, db_session: Session) -> None:
        record = ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)

        stored = db_session.get(RunRecord, sid(1))
        assert stored is record
        assert stored.player == ALICE
        assert stored.entry_fee_paid == TEST_ENTRY_FEE
        assert stored.finalized is False

    def test_duplicate_start_is_rejected(self, ledger: RunLedger) -> None:
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        with pytest.raises(RunStateError) as exc_info:
            ledger.start_run(sid(1), BOB, TEST_ENTRY_FEE)
        assert exc_info.value.reason == "run exists"
        assert ledger.get_run(sid(1)).player == ALICE

    @pytest.mark.parametrize("payment", [0, TEST_ENTRY_FEE - 1, TEST_ENTRY_FEE + 1])
    def test_wrong_fee_is_rejected(
        self, ledger: RunLedger, db_session: Session, payment: int
    ) -> None:
        with pytest.raises(RunStateError) as exc_info:
            ledger.start_run(sid(1), ALICE, payment)
        assert exc_info.value.reason == "wrong entry fee"
        assert db_session.get(RunRecord, sid(1)) is None


class TestFinalize:
    def test_first_finalize_ranks_first(
        self, ledger: RunLedger, crypto: Ed25519Crypto, db_session: Session
    ) -> None:
        outcome = play(ledger, crypto, ALICE, 1, 42)

        assert outcome.rank == 1
        assert outcome.evicted is None
        assert ledger.get_run(sid(1)).finalized is True
        stats = ledger.player_stats(ALICE)
        assert (stats.best_score, stats.runs, stats.best_rank) == (42, 1, 1)
        [top] = ledger.leaderboard()
        assert (top.player, top.score, top.session_id) == (ALICE, 42, sid(1))

    def test_unknown_run_is_rejected(self, ledger: RunLedger, crypto: Ed25519Crypto) -> None:
        payload, signature = signed_payload(crypto, ALICE, sid(9), 5)
        with pytest.raises(SessionError) as exc_info:
            ledger.finalize(payload, signature, ALICE)
        assert exc_info.value.reason == "unknown run"

    def test_non_owner_cannot_finalize(self, ledger: RunLedger, crypto: Ed25519Crypto) -> None:
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(crypto, BOB, sid(1), 5)
        with pytest.raises(IdentityMismatch) as exc_info:
            ledger.finalize(payload, signature, BOB)
        assert exc_info.value.reason == "not run owner"

    def test_payload_for_another_player_is_rejected(
        self, ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(crypto, BOB, sid(1), 5)
        with pytest.raises(IdentityMismatch):
            ledger.finalize(payload, signature, ALICE)

    def test_second_finalize_is_rejected(self, ledger: RunLedger, crypto: Ed25519Crypto) -> None:
        play(ledger, crypto, ALICE, 1, 10)
        payload, signature = signed_payload(crypto, ALICE, sid(1), 99)

        with pytest.raises(RunStateError) as exc_info:
            ledger.finalize(payload, signature, ALICE)

        assert exc_info.value.reason == "already finalized"
        assert ledger.player_stats(ALICE).runs == 1
        assert [e.score for e in ledger.leaderboard()] == [10]

    def test_untrusted_signature_leaves_no_trace(
        self, ledger: RunLedger, db_session: Session
    ) -> None:
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(Ed25519Crypto.generate(), ALICE, sid(1), 77)

        with pytest.raises(AttestationError) as exc_info:
            ledger.finalize(payload, signature, ALICE)

        assert exc_info.value.reason == "bad signature"
        assert ledger.get_run(sid(1)).finalized is False
        assert db_session.get(PlayerStats, ALICE) is None
        assert ledger.leaderboard() == []

    def test_tampered_score_fails_verification(
        self, ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(crypto, ALICE, sid(1), 3)
        forged, _ = signed_payload(crypto, ALICE, sid(1), 300)

        with pytest.raises(AttestationError):
            ledger.finalize(forged, signature, ALICE)

    def test_best_score_is_a_running_maximum(
        self, ledger: RunLedger, crypto: Ed25519Crypto, clock: StepClock
    ) -> None:
        play(ledger, crypto, ALICE, 1, 30)
        clock.advance(1)
        play(ledger, crypto, ALICE, 2, 12)

        stats = ledger.player_stats(ALICE)
        assert stats.best_score == 30
        assert stats.runs == 2
        assert stats.best_rank == 1

    def test_zero_score_still_counts_as_a_run(
        self, ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        outcome = play(ledger, crypto, ALICE, 1, 0)
        assert outcome.rank == 1
        assert ledger.player_stats(ALICE).runs == 1


class TestLeaderboardUpdates:
    @pytest.fixture()
    def small_ledger(
        self, db_session: Session, crypto: Ed25519Crypto, clock: StepClock
    ) -> RunLedger:
        return RunLedger(db_session, crypto, entry_fee=TEST_ENTRY_FEE, capacity=2, clock=clock)

    def test_eviction_clears_best_rank(
        self, small_ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        play(small_ledger, crypto, ALICE, 1, 10)
        play(small_ledger, crypto, BOB, 2, 20)

        outcome = play(small_ledger, crypto, CAROL, 3, 15)

        assert outcome.rank == 2
        assert outcome.evicted == ALICE
        assert small_ledger.player_stats(ALICE).best_rank == 0
        assert small_ledger.player_stats(BOB).best_rank == 1
        assert small_ledger.player_stats(CAROL).best_rank == 2

    def test_score_below_full_board_is_not_ranked(
        self, small_ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        play(small_ledger, crypto, ALICE, 1, 10)
        play(small_ledger, crypto, BOB, 2, 20)

        outcome = play(small_ledger, crypto, CAROL, 3, 5)

        assert outcome.rank == 0
        stats = small_ledger.player_stats(CAROL)
        assert (stats.best_score, stats.runs, stats.best_rank) == (5, 1, 0)
        assert [e.player for e in small_ledger.leaderboard()] == [BOB, ALICE]

    def test_new_entry_shifts_ranks_of_others(
        self, small_ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        play(small_ledger, crypto, ALICE, 1, 10)
        assert small_ledger.player_stats(ALICE).best_rank == 1

        play(small_ledger, crypto, BOB, 2, 20)

        assert small_ledger.player_stats(ALICE).best_rank == 2
        assert small_ledger.player_stats(BOB).best_rank == 1

    def test_player_keeps_rank_while_any_slot_remains(
        self, small_ledger: RunLedger, crypto: Ed25519Crypto
    ) -> None:
        play(small_ledger, crypto, ALICE, 1, 10)
        play(small_ledger, crypto, ALICE, 2, 30)

        outcome = play(small_ledger, crypto, BOB, 3, 20)

        assert outcome.evicted == ALICE
        assert small_ledger.player_stats(ALICE).best_rank == 1
        assert small_ledger.player_stats(BOB).best_rank == 2

    def test_slots_are_persisted_in_rank_order(
        self, small_ledger: RunLedger, crypto: Ed25519Crypto, db_session: Session
    ) -> None:
        play(small_ledger, crypto, ALICE, 1, 10)
        play(small_ledger, crypto, BOB, 2, 20)
        play(small_ledger, crypto, CAROL, 3, 15)

        slots = db_session.scalars(select(LeaderboardSlot).order_by(LeaderboardSlot.position))
        assert [(s.position, s.player, s.score) for s in slots] == [(0, BOB, 20), (1, CAROL, 15)]


def test_unknown_player_reads_as_zeros(ledger: RunLedger) -> None:
    stats = ledger.player_stats(CAROL)
    assert (stats.best_score, stats.runs, stats.best_rank) == (0, 0, 0)


class TestCryptoProviderHash:
    def test_finalize_digests_through_the_provider(self, db_session: Session) -> None:
        crypto = Sha256Crypto(SigningKey.generate())
        ledger = RunLedger(db_session, crypto, entry_fee=TEST_ENTRY_FEE)
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(crypto, ALICE, sid(1), 12)
        calls_before = crypto.hash_calls

        outcome = ledger.finalize(payload, signature, ALICE)

        assert outcome.rank == 1
        assert crypto.hash_calls == calls_before + 1

    def test_signature_over_another_digest_is_rejected(self, db_session: Session) -> None:
        signing_key = SigningKey.generate()
        sha_crypto = Sha256Crypto(signing_key)
        ledger = RunLedger(db_session, Ed25519Crypto(signing_key), entry_fee=TEST_ENTRY_FEE)
        ledger.start_run(sid(1), ALICE, TEST_ENTRY_FEE)
        payload, signature = signed_payload(sha_crypto, ALICE, sid(1), 12)

        with pytest.raises(AttestationError):
            ledger.finalize(payload, signature, ALICE)


def test_board_is_locked_only_for_finalization() -> None:
    dialect = postgresql.dialect()
    assert "FOR UPDATE" in str(slot_query(for_update=True).compile(dialect=dialect))
    assert "FOR UPDATE" not in str(slot_query().compile(dialect=dialect))
