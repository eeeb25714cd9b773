"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORAGE_BACKENDS = {"memory", "file", "supabase"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "file"
    storage_path: str = "logwell-data.json"
    storage_key_prefix: str = "@LogWell:"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "kv_store"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org/api/v0"
    product_cache_ttl_seconds: int = 86400
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="LOGWELL_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_storage_backend(raw: str | None) -> str:
    """Normalize the configured storage backend name."""
    if raw is None:
        return "file"
    cleaned = raw.strip().lower()
    if not cleaned:
        return "file"
    if cleaned not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend: {raw}")
    return cleaned
