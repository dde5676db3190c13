"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from app.core.config import Settings
from app.db.session import _connect_args


def test_prod_settings_rejects_wildcard_origins():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        APP_ENV="prod",
        ALLOWED_ORIGINS="*"
    )
    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_sqlite():
    settings = Settings(
        DATABASE_URL="sqlite:///./leave_ledger.db",
        APP_ENV="prod",
        ALLOWED_ORIGINS="https://hr.example.com"
    )
    with pytest.raises(ValueError, match="DATABASE_URL"):
        settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = Settings(DATABASE_URL="postgresql://test", APP_ENV="local", ALLOWED_ORIGINS="*")
    settings.validate_production()
    assert settings.get_allowed_origins_list() == ["*"]


def test_origins_are_split_and_trimmed():
    settings = Settings(ALLOWED_ORIGINS="https://a.example.com, https://b.example.com ,")
    assert settings.get_allowed_origins_list() == ["https://a.example.com", "https://b.example.com"]


@pytest.mark.parametrize("field,value", [
    ("APP_ENV", "qa"),
    ("LOG_LEVEL", "LOUD"),
    ("STORE_TIMEOUT_SECONDS", 0),
    ("SUBMIT_MAX_RETRIES", -1),
])
def test_invalid_settings_are_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_store_timeout_reaches_the_driver():
    assert _connect_args("sqlite:///./x.db", 2.5) == {"check_same_thread": False, "timeout": 2.5}
    assert _connect_args("postgresql://db/leave", 2.5) == {"options": "-c statement_timeout=2500"}
