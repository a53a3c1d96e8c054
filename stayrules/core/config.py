from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration.

    Values are loaded from environment variables and optional .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # App
    app_name: str = "Stay Rules Service"
    environment: str = "dev"  # dev|staging|prod
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./stayrules.db"

    # Defaults used when a property has no stored rule set
    default_min_stay: int = 1
    default_min_advance_booking: int = 0
    default_last_minute_booking: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
