"""Hashing helpers built on BLAKE3 and a canonical JSON encoding."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from blake3 import blake3

Hasher = Callable[[bytes], bytes]


def canonical_json(value: Any) -> bytes:
    """Encode ``value`` as compact, key-sorted UTF-8 JSON.

    Every digest in the service is computed over this encoding so clients in
    other languages can reproduce it byte for byte.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=True).encode(
        "utf-8"
    )


def blake3_digest(data: bytes) -> bytes:
    """Return the byte digest of the supplied data."""
    return blake3(data).digest()


def blake3_hexdigest(data: bytes) -> str:
    """Return the hexadecimal digest of the supplied data."""
    return blake3(data).hexdigest()


def digest_json(value: Any) -> str:
    """Return the hex BLAKE3 digest of the canonical JSON encoding of ``value``."""
    return blake3_hexdigest(canonical_json(value))
