# lockbox/core/config.py
"""
Vault settings, read from the environment and an optional .env file.

Only the token verification secret is sensitive here: envelope keys are
generated per value and never configured.
"""
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./lockbox.db"
DEV_SECRET_KEY = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"

# Sync driver prefixes mapped to the async drivers the engine needs
ASYNC_DRIVERS = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("sqlite:///", "sqlite+aiosqlite:///"),
)


class Settings(BaseSettings):
    PROJECT_NAME: str = "Lockbox"
    PROJECT_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"

    # Bearer tokens are issued by the authentication service; the vault
    # only checks their signature and reads the subject.
    SECRET_KEY: str = DEV_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    AUTH_TOKEN_URL: str = "/auth/login"

    DATABASE_URL: str = SQLITE_FALLBACK_URL
    DATABASE_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Comma separated; empty means no cross-origin access at all
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def use_async_driver(cls, v):
        """postgres://, postgresql:// and sqlite:/// URLs are rewritten for asyncpg / aiosqlite."""
        if v is None:
            return SQLITE_FALLBACK_URL
        url = v.strip()
        for prefix, async_prefix in ASYNC_DRIVERS:
            if url.startswith(prefix):
                return async_prefix + url[len(prefix):]
        return url

    @model_validator(mode="after")
    def require_real_secret_in_production(self):
        if self.is_production and self.SECRET_KEY == DEV_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set when ENVIRONMENT is production")
        return self

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
