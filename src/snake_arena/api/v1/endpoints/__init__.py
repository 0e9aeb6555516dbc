"""API endpoint modules for version 1."""

from .attestation import router as attestation_router
from .leaderboard import router as leaderboard_router
from .runs import router as runs_router
from .sessions import router as sessions_router
from .system import router as system_router

__all__ = [
    "attestation_router",
    "leaderboard_router",
    "runs_router",
    "sessions_router",
    "system_router",
]
