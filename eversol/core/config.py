# eversol/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Storage backends (STORAGE_BACKEND):
      - "sql"      : SQLModel table on DATABASE_URL (default, SQLite file)
      - "supabase" : objects in a Supabase Storage bucket
      - "memory"   : process-lifetime dict (tests / local demos)

    Optional:
      - JWT_SECRET (bearer tokens are rejected when unset)
      - SUPABASE_URL / SUPABASE_KEY / SUPABASE_SERVICE_ROLE_KEY
        (only required with STORAGE_BACKEND=supabase)
      - COUPONS_FILE (JSON list of coupon records to preload)
    """

    PROJECT_NAME: str = "Eversol Storefront API"
    API_V1_STR: str = "/api/v1"

    STORAGE_BACKEND: Literal["sql", "supabase", "memory"] = "sql"
    DATABASE_URL: str = "sqlite:///./eversol.db"

    # Supabase Storage backend
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "storefront-state"

    # Shopper identity (bearer tokens)
    JWT_SECRET: str | None = None
    JWT_ALG: str = "HS256"

    # Pricing / delivery
    TAX_RATE: float = 0.05
    PINCODE_LOOKUP_DELAY_MS: int = 500

    STOREFRONT_URL: str = "http://localhost:3000"
    COUPONS_FILE: str | None = None

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
