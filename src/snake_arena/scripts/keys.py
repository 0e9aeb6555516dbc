"""Generate an attester keypair for ATTESTER_PRIVATE_KEY / TRUSTED_ATTESTER_PUBKEY."""
from __future__ import annotations

import argparse

from snake_arena.services.crypto import Ed25519Crypto


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate an Ed25519 attester keypair")
    parser.add_argument(
        "--from-private",
        default=None,
        help="Derive the public key for an existing hex private key instead of generating one",
    )
    args = parser.parse_args()

    if args.from_private:
        crypto = Ed25519Crypto.from_hex(args.from_private)
    else:
        crypto = Ed25519Crypto.generate()

    print(f"ATTESTER_PRIVATE_KEY={crypto.private_key_hex}")
    print(f"TRUSTED_ATTESTER_PUBKEY={crypto.public_key_hex}")


if __name__ == "__main__":
    main()
