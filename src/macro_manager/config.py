"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_image_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    store_backend: str = "json"
    data_dir: Path = Path("data")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_store_backend(raw: str) -> str:
    """Normalize the configured record store backend."""
    cleaned = raw.strip().lower()
    if cleaned in {"", "file", "json"}:
        return "json"
    if cleaned == "supabase":
        return "supabase"
    raise ValueError(f"Unknown store backend: {raw}")
