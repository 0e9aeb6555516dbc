"""Version 1 API endpoints."""

from .endpoints import (
    attestation_router,
    leaderboard_router,
    runs_router,
    sessions_router,
    system_router,
)

__all__ = [
    "attestation_router",
    "leaderboard_router",
    "runs_router",
    "sessions_router",
    "system_router",
]
