"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from finboard.config import Settings


def test_defaults(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "abc")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("BCRYPT_ROUNDS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./finboard.db"
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 1440
    assert settings.BCRYPT_ROUNDS == 12


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "abc")
    monkeypatch.setenv("FRONTEND_URL", "https://dashboard.example.com")
    monkeypatch.setenv("SQL_ECHO", "true")

    settings = Settings(_env_file=None)

    assert settings.FRONTEND_URL == "https://dashboard.example.com"
    assert settings.SQL_ECHO is True


def test_jwt_secret_is_required(monkeypatch) -> None:
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
