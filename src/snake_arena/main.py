"""Main entry point for the Snake Arena application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis import RedisError

from snake_arena.api.v1 import (
    attestation_router,
    leaderboard_router,
    runs_router,
    sessions_router,
    system_router,
)
from snake_arena.core.settings import settings
from snake_arena.db.session import create_tables
from snake_arena.services.crypto import get_crypto
from snake_arena.services.sessions import RedisSessionStore, get_session_store

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Snake Arena API",
    description="Attested Snake runs and a bounded on-ledger leaderboard",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(sessions_router, prefix="/api/v1")
app.include_router(attestation_router, prefix="/api/v1")
app.include_router(runs_router, prefix="/api/v1")
app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    # Resolve the attester key eagerly so its public key is logged at boot.
    get_crypto()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/ready")
async def readiness_check() -> JSONResponse:
    """Report readiness, including the Redis session store when one is configured."""
    store = get_session_store()
    if not isinstance(store, RedisSessionStore):
        return JSONResponse({"status": "ok", "redis": "disabled"})
    try:
        store.ping()
    except RedisError as err:
        logger.warning("Readiness check failed to reach Redis: %s", err)
        return JSONResponse({"status": "error", "redis": "error"}, status_code=503)
    return JSONResponse({"status": "ok", "redis": "ok"})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("snake_arena.main:app", host="0.0.0.0", port=8787, reload=settings.debug)
