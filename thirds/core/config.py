"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./thirds.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "gemini-api" | "litellm"
    # - gemini-api: Gemini API (API Key)
    # - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    LLM_PROVIDER: Literal["gemini-api", "litellm"] = "gemini-api"

    # Gemini model name (for gemini-api)
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Google API Key (for gemini-api provider)
    GOOGLE_API_KEY: str = ""

    # LiteLLM model identifier (for litellm provider)
    LITELLM_MODEL: str = "openai/gpt-4o-mini"

    # LiteLLM custom endpoint (optional, for proxy servers)
    LITELLM_API_BASE: str = ""

    # LiteLLM custom API key (optional, for custom endpoints)
    LITELLM_API_KEY: str = ""

    # ===========================================
    # Auth
    # ===========================================
    AUTH_PROVIDER: Literal["mock"] = "mock"
    AUTH_REQUIRED: bool = True

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # ===========================================
    # Insights
    # ===========================================
    # Narrative generation is optional; the rule-based fallback is always available
    INSIGHTS_AI_ENABLED: bool = True
    INSIGHTS_LLM_TIMEOUT_SECONDS: float = 8.0
    INSIGHTS_LOOKBACK_DAYS: int = 30
    INSIGHTS_RECENT_DAYS: int = 7
    # Minimum completed tasks in an hour before it can be the "fastest" hour
    INSIGHTS_MIN_SAMPLES: int = 3

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
