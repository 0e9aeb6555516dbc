"""Application settings and configuration.

This module defines all configuration options for the Snake Arena service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Snake Arena", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration (run ledger + leaderboard)
    database_url: str = Field(default="sqlite:///./snake_arena.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis backs sessions and rate limits when configured; in-process otherwise
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # Session lifetime
    session_ttl_seconds: int = Field(default=3600, alias="SESSION_TTL_SECONDS")

    # Heartbeat cadence bounds (milliseconds)
    hb_min_beats: int = Field(default=3, alias="HB_MIN_BEATS")
    hb_min_ms: int = Field(default=150, alias="HB_MIN_MS")
    hb_max_ms: int = Field(default=1200, alias="HB_MAX_MS")
    hb_allow_unsigned: bool = Field(default=False, alias="HB_ALLOW_UNSIG")

    # Attestation keys (hex encoded Ed25519 seed / public key)
    attester_private_key: str | None = Field(default=None, alias="ATTESTER_PRIVATE_KEY")
    trusted_attester_pubkey: str | None = Field(default=None, alias="TRUSTED_ATTESTER_PUBKEY")

    # Run ledger
    entry_fee: int = Field(default=500_000_000_000_000, alias="ENTRY_FEE")
    leaderboard_capacity: int = Field(default=25, alias="LEADERBOARD_CAPACITY")

    # Per-origin rate ceilings (requests per window)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_session: int = Field(default=20, alias="RATE_LIMIT_SESSION")
    rate_limit_session_window_seconds: int = Field(
        default=60,
        alias="RATE_LIMIT_SESSION_WINDOW_SECONDS",
    )
    rate_limit_heartbeat: int = Field(default=10, alias="RATE_LIMIT_HEARTBEAT")
    rate_limit_heartbeat_window_seconds: int = Field(
        default=1,
        alias="RATE_LIMIT_HEARTBEAT_WINDOW_SECONDS",
    )
    rate_limit_verify: int = Field(default=60, alias="RATE_LIMIT_VERIFY")
    rate_limit_verify_window_seconds: int = Field(
        default=60,
        alias="RATE_LIMIT_VERIFY_WINDOW_SECONDS",
    )

    # CORS configuration for the game client
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def rate_limits(self) -> dict[str, tuple[int, int]]:
        """Return the per-operation `(limit, window_seconds)` ceilings."""
        return {
            "session": (self.rate_limit_session, self.rate_limit_session_window_seconds),
            "heartbeat": (self.rate_limit_heartbeat, self.rate_limit_heartbeat_window_seconds),
            "verify": (self.rate_limit_verify, self.rate_limit_verify_window_seconds),
        }


settings = Settings()
