"""Configuration management for campaign-agent."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from campaign_agent.errors import ConfigurationError

try:
    load_dotenv()
except (PermissionError, OSError):
    # .env may be unreadable in sandboxed environments; rely on the process env
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Credentials are optional at load time and checked by require_*().
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API key")
    SUPABASE_URL: Optional[str] = Field(default=None, description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(
        default=None, description="Supabase service role key"
    )

    CAMPAIGN_AGENT_ENV: str = Field(default="dev", description="Environment: dev, test, prod")

    CLASSIFIER_MODEL: str = Field(default="gpt-4o-mini", description="Model for intent routing")
    CLASSIFIER_TEMPERATURE: float = Field(default=0.2)
    GENERATION_MODEL: str = Field(default="gpt-4o-mini", description="Model for ideas/concepts")
    GENERATION_TEMPERATURE: float = Field(default=0.7)

    STORE_BACKEND: Literal["supabase", "local"] = Field(
        default="supabase", description="Where sessions and messages are persisted"
    )
    LOCAL_STORE_DIR: str = Field(default="sessions", description="Directory for the local store")

    CORS_ALLOW_ORIGINS: str = Field(default="*", description="Comma-separated allowed origins")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

    def require_openai(self) -> str:
        if not self.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return self.OPENAI_API_KEY

    def require_supabase(self) -> tuple[str, str]:
        if not self.SUPABASE_URL or not self.SUPABASE_SERVICE_ROLE_KEY:
            raise ConfigurationError("Supabase configuration not found")
        return self.SUPABASE_URL, self.SUPABASE_SERVICE_ROLE_KEY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (loaded once)."""
    return Settings()
