"""Signature utilities built on Ed25519 primitives."""
from __future__ import annotations

import binascii

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

_PUBKEY_HEX_LENGTH = 64  # 32 bytes
CALLER_MESSAGE_PREFIX = "snake-arena"


def normalize_identity(identity: str) -> str:
    """Return the canonical (stripped, lower-case) form of a player identity."""
    return identity.strip().lower().removeprefix("0x")


def is_valid_identity(identity: str) -> bool:
    """Return True if ``identity`` is a hex-encoded 32-byte Ed25519 public key."""
    if len(identity) != _PUBKEY_HEX_LENGTH:
        return False
    try:
        bytes.fromhex(identity)
    except ValueError:
        return False
    return True


def verify_signature(pubkey_hex: str, message: bytes, signature_hex: str) -> bool:
    """Verify an Ed25519 signature.

    Args:
        pubkey_hex: Hex-encoded 32-byte public key.
        message: Exact bytes that were signed on the client.
        signature_hex: Hex-encoded 64-byte signature.

    Returns:
        True if the signature is valid for `message` under `pubkey_hex`; False otherwise.
    """
    try:
        pubkey = VerifyKey(binascii.unhexlify(pubkey_hex))
        signature = binascii.unhexlify(signature_hex)
        pubkey.verify(message, signature)
        return True
    except (BadSignatureError, binascii.Error, ValueError, TypeError):
        return False


def caller_message(action: str, *fields: object) -> bytes:
    """Build the canonical bytes a caller signs to authorise a ledger call.

    Example:
        ``caller_message("run-start", session_id, player, payment)`` yields
        ``b"snake-arena|run-start|<session_id>|<player>|<payment>"``.
    """
    parts = [CALLER_MESSAGE_PREFIX, action, *(str(field) for field in fields)]
    return "|".join(parts).encode("utf-8")
