import pytest
from pydantic import ValidationError

from storefront.config import (
    DEFAULT_JWT_SECRET,
    Settings,
    allowed_origins,
    ensure_secure_runtime_settings,
    settings,
)


@pytest.fixture
def production_like_settings():
    original = (settings.testing, settings.jwt_secret, settings.database_url)
    settings.testing = False
    settings.jwt_secret = "s" * 48
    settings.database_url = "postgresql+psycopg2://storefront:storefront@db:5432/storefront"
    try:
        yield settings
    finally:
        settings.testing, settings.jwt_secret, settings.database_url = original


def test_secure_settings_pass(production_like_settings):
    ensure_secure_runtime_settings()


def test_default_jwt_secret_is_rejected(production_like_settings):
    production_like_settings.jwt_secret = DEFAULT_JWT_SECRET
    with pytest.raises(RuntimeError, match="non-default"):
        ensure_secure_runtime_settings()


def test_short_jwt_secret_is_rejected(production_like_settings):
    production_like_settings.jwt_secret = "short-secret"
    with pytest.raises(RuntimeError, match="at least 32"):
        ensure_secure_runtime_settings()


def test_sqlite_is_rejected_outside_testing(production_like_settings):
    production_like_settings.database_url = "sqlite+pysqlite:///./storefront.db"
    with pytest.raises(RuntimeError, match="postgres"):
        ensure_secure_runtime_settings()


def test_testing_mode_skips_runtime_checks():
    ensure_secure_runtime_settings()


def test_app_mode_and_strategy_are_validated(monkeypatch):
    monkeypatch.setenv("STOREFRONT_APP_MODE", " Pilot ")
    monkeypatch.setenv("STOREFRONT_ORDER_NUMBER_STRATEGY", "COUNTER")
    configured = Settings()
    assert configured.app_mode == "pilot"
    assert configured.order_number_strategy == "counter"

    monkeypatch.setenv("STOREFRONT_ORDER_NUMBER_STRATEGY", "random")
    with pytest.raises(ValidationError):
        Settings()


def test_allowed_origins_splits_and_trims():
    original = settings.cors_allowed_origins
    settings.cors_allowed_origins = "https://airs.example, ,http://localhost:3000 "
    try:
        assert allowed_origins() == ["https://airs.example", "http://localhost:3000"]
    finally:
        settings.cors_allowed_origins = original
