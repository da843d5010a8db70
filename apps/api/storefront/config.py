from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "airs-storefront-jwt-secret"
ALLOWED_APP_MODES = {"demo", "pilot", "production"}
ALLOWED_ORDER_NUMBER_STRATEGIES = {"latest", "counter"}
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    app_name: str = "AiRS Storefront Order Service"
    app_mode: str = Field(default="demo", validation_alias="STOREFRONT_APP_MODE")
    log_level: str = Field(default="INFO", validation_alias="STOREFRONT_LOG_LEVEL")

    database_url: str = Field(
        default="sqlite+pysqlite:///./storefront.db",
        validation_alias="STOREFRONT_DATABASE_URL",
    )
    auto_create_schema: bool = True
    require_migrations: bool = False
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    jwt_secret: str = DEFAULT_JWT_SECRET
    allowed_roles: str = "CUSTOMER,ADMIN"
    enable_test_auth_bypass: bool = False
    testing: bool = Field(default=False, validation_alias="STOREFRONT_TESTING")

    order_number_prefix: str = "AiRS"
    order_number_region: str = "IN"
    order_number_strategy: str = Field(
        default="latest", validation_alias="STOREFRONT_ORDER_NUMBER_STRATEGY"
    )

    idempotency_ttl_s: int = 24 * 60 * 60
    notifications_page_size: int = 50

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("app_mode")
    @classmethod
    def validate_app_mode(cls, value: str) -> str:
        mode = value.lower().strip()
        if mode not in ALLOWED_APP_MODES:
            allowed = ", ".join(sorted(ALLOWED_APP_MODES))
            raise ValueError(f"STOREFRONT_APP_MODE must be one of: {allowed}")
        return mode

    @field_validator("order_number_strategy")
    @classmethod
    def validate_order_number_strategy(cls, value: str) -> str:
        strategy = value.lower().strip()
        if strategy not in ALLOWED_ORDER_NUMBER_STRATEGIES:
            allowed = ", ".join(sorted(ALLOWED_ORDER_NUMBER_STRATEGIES))
            raise ValueError(f"STOREFRONT_ORDER_NUMBER_STRATEGY must be one of: {allowed}")
        return strategy


settings = Settings()


def is_production_mode() -> bool:
    return settings.app_mode == "production"


def allowed_origins() -> list[str]:
    return [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]


def allowed_roles_list() -> list[str]:
    return [value.strip() for value in settings.allowed_roles.split(",") if value.strip()]


def ensure_secure_runtime_settings() -> None:
    """Fail fast when production-like runtime uses insecure defaults."""
    if not settings.testing and settings.jwt_secret == DEFAULT_JWT_SECRET:
        raise RuntimeError(
            "JWT_SECRET must be set to a non-default value when STOREFRONT_TESTING is false"
        )
    if not settings.testing and len(settings.jwt_secret) < MIN_SECRET_LENGTH:
        raise RuntimeError(
            "JWT_SECRET must be at least "
            f"{MIN_SECRET_LENGTH} characters when STOREFRONT_TESTING is false"
        )
    if not settings.testing and is_sqlite_url(settings.database_url):
        raise RuntimeError(
            "STOREFRONT_DATABASE_URL must use postgres when STOREFRONT_TESTING is false"
        )


def is_sqlite_url(database_url: str) -> bool:
    value = database_url.strip().lower()
    return value.startswith("sqlite")
