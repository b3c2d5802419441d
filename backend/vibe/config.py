"""
Vibe Backend — Application Configuration
=========================================

What:  Centralized configuration using Pydantic Settings.
How:   Values come from environment variables (or a .env file), are
       validated on import, and exposed through the `settings` singleton.
Who:   Imported by every module that needs configuration values.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "vibe-secret-key-2024"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments must
    override JWT_SECRET and usually DATABASE_URL and CORS_ORIGINS.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Default: process-local in-memory SQLite. Data lives as long as the
    # server process. Point at postgresql+asyncpg://... for a durable store.
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite uses one shared
    # connection.
    db_pool_size: int = Field(default=20, ge=5, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Authentication ────────────────────────────────────────────────────
    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="HMAC secret used to sign bearer tokens",
    )
    jwt_algorithm: str = Field(default="HS256")

    # 10080 minutes = 7 days
    jwt_expire_minutes: int = Field(default=10_080, ge=1, le=525_600)

    # bcrypt cost factor (log2 of the key-expansion rounds)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list (parsed by cors_origins_list below)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3002, ge=1024, le=65535)

    # Directory served under /public (mounted only when it exists)
    static_root: str = Field(default="public")

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only HMAC algorithms make sense with a shared secret."""
        valid = {"HS256", "HS384", "HS512"}
        if v not in valid:
            raise ValueError(f"Invalid jwt_algorithm '{v}'. Must be one of: {valid}")
        return v

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-IP sliding window
    rate_limit_requests: int = Field(default=1000, ge=10, le=100_000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Checks that security-sensitive settings were overridden.
        When:  Called during app startup (lifespan).
        Raises ValueError listing every problem found.
        """
        errors = []
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append(
                "JWT_SECRET still uses the development default. "
                "Set a long random value before exposing the API."
            )
        elif len(self.jwt_secret) < 32:
            errors.append("JWT_SECRET is shorter than 32 characters.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
