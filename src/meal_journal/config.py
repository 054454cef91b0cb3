"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3"
    groq_api_key: str | None = None
    groq_model: str = "llama-3.1-8b-instant"
    groq_base_url: str = "https://api.groq.com/openai/v1"
    skip_llm: bool = False
    force_llm: bool | None = None
    llm_timeout_seconds: float = 30.0
    llm_health_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_force_refresh(settings: Settings) -> bool:
    """Re-estimate every food unless running in production or told otherwise."""
    if settings.force_llm is not None:
        return settings.force_llm
    return settings.environment != PRODUCTION
