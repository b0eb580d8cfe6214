"""Application configuration via Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Salon PIX API"
    debug: bool = False
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_algorithm: str = "HS256"
    jwt_expires_in_minutes: int = Field(60 * 24, alias="JWT_EXPIRES_IN")

    default_timezone: str = Field("America/Sao_Paulo", alias="DEFAULT_TIMEZONE")

    pix_default_city: str = Field("BRASIL", alias="PIX_DEFAULT_CITY")
    pix_txid_prefix: str = Field("BELA", alias="PIX_TXID_PREFIX")
    pix_payment_description: str = Field("", alias="PIX_PAYMENT_DESCRIPTION")
    payment_default_expiry_minutes: int = Field(30, alias="PAYMENT_DEFAULT_EXPIRY_MINUTES")

    expiry_sweeper_enabled: bool = Field(False, alias="EXPIRY_SWEEPER_ENABLED")
    expiry_sweep_interval_minutes: int = Field(5, alias="EXPIRY_SWEEP_INTERVAL_MINUTES")


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()
