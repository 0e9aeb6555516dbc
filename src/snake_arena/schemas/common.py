"""Shared Pydantic schemas and field types."""
from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, Field

from snake_arena.core.security import is_valid_identity, normalize_identity

HEX_64_PATTERN = r"^(0x)?[0-9a-fA-F]{64}$"


def _player_identity(value: str) -> str:
    identity = normalize_identity(value)
    if not is_valid_identity(identity):
        raise ValueError("player must be a hex-encoded 32-byte Ed25519 public key")
    return identity


def _hex_64(value: str) -> str:
    return value.lower().removeprefix("0x")


PlayerId = Annotated[
    str,
    Field(description="Hex-encoded Ed25519 public key of the player"),
    AfterValidator(_player_identity),
]

Hex64 = Annotated[
    str,
    Field(pattern=HEX_64_PATTERN, description="64 hex characters, optional 0x prefix"),
    AfterValidator(_hex_64),
]
