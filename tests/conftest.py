# tests/conftest.py
from __future__ import annotations

import hashlib
import os
from collections.abc import Generator, Iterator
from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from snake_arena.core.payload import ScorePayload
from snake_arena.db.session import Base
from snake_arena.db.session import get_db as app_get_session
from snake_arena.main import app as fastapi_app
from snake_arena.services.crypto import Ed25519Crypto
from snake_arena.services.ledger import RunLedger
from snake_arena.services.sessions import InMemorySessionStore, SessionService

TEST_DB_URL = "sqlite://"
TEST_ENTRY_FEE = 1_000


class StepClock:
    """Deterministic clock advancing by ``step`` on every call."""

    def __init__(self, start: float = 1_000.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class Player:
    """A test identity holding its Ed25519 signing key."""

    signing_key: SigningKey

    @property
    def id(self) -> str:
        return self.signing_key.verify_key.encode().hex()

    def sign(self, message: bytes) -> str:
        return self.signing_key.sign(message).signature.hex()


def make_player() -> Player:
    return Player(SigningKey.generate())


class Sha256Crypto(Ed25519Crypto):
    """Attester whose digest is SHA-256; counts every hash it computes."""

    def __init__(self, signing_key: SigningKey) -> None:
        super().__init__(signing_key)
        self.hash_calls = 0

    def hash(self, data: bytes) -> bytes:
        self.hash_calls += 1
        return hashlib.sha256(data).digest()


def signed_payload(
    crypto: Ed25519Crypto,
    player: str,
    session_id: str,
    score: int,
) -> tuple[ScorePayload, str]:
    """Build a ScorePayload with placeholder hashes and sign it as the attester."""
    payload = ScorePayload(
        player=player,
        session_id=session_id,
        score=score,
        content_hash="ab" * 32,
        cadence_digest="cd" * 32,
    )
    return payload, crypto.sign(payload.digest(crypto.hash))


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def crypto() -> Ed25519Crypto:
    """A fresh attester key, independent of the process-wide one."""
    return Ed25519Crypto.generate()


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def session_store(clock: StepClock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture()
def session_service(session_store: InMemorySessionStore, clock: StepClock) -> SessionService:
    return SessionService(session_store, ttl_seconds=60, clock=clock)


@pytest.fixture()
def player() -> Player:
    return make_player()


@pytest.fixture()
def other_player() -> Player:
    return make_player()


@pytest.fixture()
def ledger(db_session: Session, crypto: Ed25519Crypto, clock: StepClock) -> RunLedger:
    return RunLedger(db_session, crypto, entry_fee=TEST_ENTRY_FEE, capacity=25, clock=clock)
