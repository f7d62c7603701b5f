"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_table: str = "app_storage"
    storage_timeout_seconds: float = 5.0
    favorites_storage_key: str = "favsList"
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    http_timeout_seconds: float = 15
    product_cache_ttl_seconds: int = 3600
    additive_cache_ttl_seconds: int = 86400
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
