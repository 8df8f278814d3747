import pytest
from pydantic import ValidationError

from lockbox.core.config import SQLITE_FALLBACK_URL, Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@db/vault", "postgresql+asyncpg://u:p@db/vault"),
        ("postgresql://u:p@db/vault", "postgresql+asyncpg://u:p@db/vault"),
        ("postgresql+asyncpg://u:p@db/vault", "postgresql+asyncpg://u:p@db/vault"),
        ("sqlite:///./vault.db", "sqlite+aiosqlite:///./vault.db"),
        ("  sqlite+aiosqlite:///./vault.db ", "sqlite+aiosqlite:///./vault.db"),
    ],
)
def test_database_url_is_normalized_for_async_drivers(raw, expected):
    assert Settings(DATABASE_URL=raw).DATABASE_URL == expected


def test_default_database_is_sqlite(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL == SQLITE_FALLBACK_URL


def test_cors_origins_parsed_from_comma_separated_string():
    settings = Settings(CORS_ORIGINS="https://a.example, https://b.example ,")

    assert settings.BACKEND_CORS_ORIGINS == ["https://a.example", "https://b.example"]


def test_empty_cors_origins_means_none_allowed():
    assert Settings(CORS_ORIGINS="  ").BACKEND_CORS_ORIGINS == []


def test_production_flag():
    assert Settings(ENVIRONMENT="Production", SECRET_KEY="s3cr3t-from-vault").is_production
    assert not Settings(ENVIRONMENT="development").is_production


def test_production_refuses_the_development_secret(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ValidationError, match="SECRET_KEY"):
        Settings(_env_file=None, ENVIRONMENT="production")
