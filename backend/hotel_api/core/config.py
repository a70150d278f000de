"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("TripBazaar Hotels API", alias="APP_NAME")
    brand_name: str = Field("TripBazaar", alias="BRAND_NAME")
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(
        "sqlite+aiosqlite:///./hotel_api.db", alias="DATABASE_URL"
    )
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    cache_backend: str = Field("redis", alias="CACHE_BACKEND")
    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    cache_max_entries: int = Field(2048, alias="CACHE_MAX_ENTRIES")
    autosuggest_cache_ttl: int = Field(2 * 60 * 60, alias="AUTOSUGGEST_CACHE_TTL")
    hotel_search_cache_ttl: int = Field(5 * 60, alias="HOTEL_SEARCH_CACHE_TTL")

    supplier_base_url: str = Field("http://localhost:8080/api", alias="SUPPLIER_BASE_URL")
    supplier_api_key: str | None = Field(default=None, alias="SUPPLIER_API_KEY")
    supplier_timeout_seconds: float = Field(30.0, alias="SUPPLIER_TIMEOUT_SECONDS")
    supplier_source_market: str = Field("IN", alias="SUPPLIER_SOURCE_MARKET")
    supplier_locale: str = Field("en-US", alias="SUPPLIER_LOCALE")
    region_id_limit: int = Field(50, alias="REGION_ID_LIMIT")
    default_nationality: str = Field("IN", alias="DEFAULT_NATIONALITY")

    sms_gateway_url: str | None = Field(default=None, alias="SMS_GATEWAY_URL")
    sms_api_key: str | None = Field(default=None, alias="SMS_API_KEY")
    sms_sender_id: str = Field("TRPBZR", alias="SMS_SENDER_ID")
    sms_country_code: str = Field("91", alias="SMS_COUNTRY_CODE")
    admin_mobile: str = Field("917678105666", alias="ADMIN_MOBILE")
    dev_sms_echo: bool = Field(default=False, alias="DEV_SMS_ECHO")
    notification_max_attempts: int = Field(3, alias="NOTIFICATION_MAX_ATTEMPTS")
    notification_retry_backoff_seconds: float = Field(
        2.0, alias="NOTIFICATION_RETRY_BACKOFF_SECONDS"
    )

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
