# app/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Supabase Postgres connection string)
      - SESSION_SECRET (HMAC key used to sign session tokens)

    Optional:
      - SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY (only used for Storage uploads)
    """

    PROJECT_NAME: str = "LocalMart API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database (Supabase Postgres)
    DATABASE_URL: str

    # Session tokens
    SESSION_SECRET: str
    SESSION_JWT_ALG: str = "HS256"
    SESSION_TTL_DAYS: int = 7
    SESSION_RESTORE_TIMEOUT_SECONDS: float = 10.0

    # Password hashing; hex_sha256 is the legacy unsalted digest
    PASSWORD_SCHEME: Literal["pbkdf2_sha256", "hex_sha256"] = "pbkdf2_sha256"

    # Supabase Storage
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "assets"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
