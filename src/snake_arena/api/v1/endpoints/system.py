"""System and transparency endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from snake_arena.core.replay import GRID_SIZE, MAX_FRAMES
from snake_arena.core.settings import settings
from snake_arena.services.attestation import cadence_config_from_settings
from snake_arena.services.crypto import get_crypto, trusted_attester_pubkey

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes keys and connection strings.
    """
    cadence = cadence_config_from_settings()
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "replay": {"grid_size": GRID_SIZE, "max_frames": MAX_FRAMES},
        "cadence": {
            "min_beats": cadence.min_beats,
            "min_interval_ms": cadence.min_interval_ms,
            "max_interval_ms": cadence.max_interval_ms,
            "require_signatures": cadence.require_signatures,
        },
        "session_ttl_seconds": settings.session_ttl_seconds,
        "entry_fee": settings.entry_fee,
        "leaderboard_capacity": settings.leaderboard_capacity,
        "rate_limits": {
            "enabled": settings.rate_limit_enabled,
            **{
                name: {"limit": limit, "window_seconds": window}
                for name, (limit, window) in settings.rate_limits.items()
            },
        },
    }


@router.get("/attester")
async def get_attester() -> dict[str, str]:
    """Expose the attester's public key and the key the ledger trusts."""
    return {
        "public_key": get_crypto().public_key_hex,
        "trusted_public_key": trusted_attester_pubkey(),
    }
