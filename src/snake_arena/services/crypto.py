"""Cryptographic services for the attester."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Protocol

from nacl.signing import SigningKey

from snake_arena.core.security import verify_signature
from snake_arena.core.settings import settings
from snake_arena.utils.hash import blake3_digest

logger = logging.getLogger(__name__)

PRIVATE_KEY_LENGTH_BYTES = 32


class CryptoProvider(Protocol):
    """Narrow signing capability used by protocol code."""

    @property
    def public_key_hex(self) -> str: ...

    def sign(self, message: bytes) -> str: ...

    def verify(
        self, message: bytes, signature_hex: str, public_key_hex: str | None = None
    ) -> bool: ...

    def hash(self, data: bytes) -> bytes: ...


class Ed25519Crypto:
    """Ed25519 signer with BLAKE3 hashing."""

    def __init__(self, signing_key: SigningKey) -> None:
        self._signing_key = signing_key
        self._public_key_hex = signing_key.verify_key.encode().hex()

    @classmethod
    def from_hex(cls, private_key_hex: str) -> Ed25519Crypto:
        """Build a signer from a hex-encoded 32-byte seed."""
        try:
            seed = bytes.fromhex(private_key_hex.strip().removeprefix("0x"))
        except ValueError as err:
            raise ValueError(f"Invalid hex encoding for attester key: {err}") from err
        if len(seed) != PRIVATE_KEY_LENGTH_BYTES:
            raise ValueError("Ed25519 private keys must be 32 bytes")
        return cls(SigningKey(seed))

    @classmethod
    def generate(cls) -> Ed25519Crypto:
        """Build a signer around a freshly generated key."""
        return cls(SigningKey.generate())

    @property
    def public_key_hex(self) -> str:
        return self._public_key_hex

    @property
    def private_key_hex(self) -> str:
        return self._signing_key.encode().hex()

    def sign(self, message: bytes) -> str:
        """Sign ``message`` and return the detached signature as hex."""
        return self._signing_key.sign(message).signature.hex()

    def verify(
        self, message: bytes, signature_hex: str, public_key_hex: str | None = None
    ) -> bool:
        """Verify a signature, defaulting to this signer's own public key."""
        return verify_signature(public_key_hex or self._public_key_hex, message, signature_hex)

    def hash(self, data: bytes) -> bytes:
        return blake3_digest(data)


@lru_cache(maxsize=1)
def get_crypto() -> Ed25519Crypto:
    """Return the process-wide attester signer."""
    if settings.attester_private_key:
        crypto = Ed25519Crypto.from_hex(settings.attester_private_key)
    else:
        logger.warning("ATTESTER_PRIVATE_KEY not set; generated an ephemeral attester key")
        crypto = Ed25519Crypto.generate()
    logger.info("Attester public key: %s", crypto.public_key_hex)
    return crypto


def trusted_attester_pubkey() -> str:
    """Return the public key the run ledger accepts attestations from."""
    if settings.trusted_attester_pubkey:
        return settings.trusted_attester_pubkey.strip().lower().removeprefix("0x")
    return get_crypto().public_key_hex
