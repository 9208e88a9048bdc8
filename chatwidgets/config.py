"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatwidgets.core.di import Lifetime


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    version: str = "0.1.0"
    service_name: str = "chatwidgets"

    # HTTP
    route_prefix: str = Field(
        default="/api/chat",
        description="Prefix under which the agent endpoint is mounted",
    )

    # Agents
    default_agent_lifetime: Lifetime = Lifetime.SCOPED
    triage_fallback_agent: str | None = "help-agent"

    # AI Providers
    groq_api_key: str = ""
    default_llm_model: str = "llama-3.1-8b-instant"
    classifier_temperature: float = Field(default=0.0, ge=0, le=2)
    classifier_max_tokens: int = Field(default=16, ge=1, le=256)

    # Observability
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    prometheus_enabled: bool = True

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
