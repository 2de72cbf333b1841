"""
core/config.py -- JobTrack settings, read once from the environment.

Every tunable (token lifetime, database URL, upload limits, bind address)
is a field on Settings. Modules ask get_settings() for values instead of
reading os.environ themselves, which keeps defaults and validation in one
place and lets tests override values through env vars or monkeypatch.

pydantic-settings maps each field to the upper-cased env var of the same
name (token_expire_minutes <- TOKEN_EXPIRE_MINUTES) and also reads a .env
file in the working directory when present.

SECRET_KEY:
  Required, at least 32 characters. It signs every access token, so a
  missing or short key aborts startup instead of falling back to a default.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, applications/, or uploads/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("jobtrack.config")

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Everything except SECRET_KEY has a default, so a bare environment with
    only SECRET_KEY set is enough to start the server.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured"; the validator below
    # refuses to build Settings without a real key.
    secret_key: str = ""
    token_expire_minutes: int = 30
    signin_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = f"sqlite:///{_PROJECT_ROOT / 'jobtrack.db'}"
    upload_dir: Path = Path("public")
    max_document_bytes: int = 10 * 1024 * 1024
    max_avatar_bytes: int = 5 * 1024 * 1024

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("token_expire_minutes")
    @classmethod
    def validate_expiry(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOKEN_EXPIRE_MINUTES must be a positive number of minutes.")
        return value

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse to start without a usable SECRET_KEY.

        Unlike per-request failures, a missing key cannot be recovered from:
        tokens could be neither issued nor checked. Raising here aborts
        startup before the server accepts a single request.
        """
        if not self.secret_key:
            raise ValueError(
                "SECRET_KEY is required. Set SECRET_KEY in your environment or .env file."
            )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Build Settings on first call and hand back the same instance afterwards.

    Tests that change env vars must call get_settings.cache_clear() first.
    """
    settings = Settings()
    logger.info("Settings loaded (database=%s, upload_dir=%s)", settings.database_url.split("://")[0], settings.upload_dir)
    return settings
