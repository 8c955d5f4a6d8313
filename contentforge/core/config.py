"""Configuration management for the ContentForge research service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # LLM providers (optional at startup, checked when a provider is called)
    OPENROUTER_API_KEY: str = Field(default="", description="OpenRouter API key")
    PERPLEXITY_API_KEY: str = Field(default="", description="Perplexity API key")
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter API base URL"
    )
    PERPLEXITY_BASE_URL: str = Field(
        default="https://api.perplexity.ai", description="Perplexity API base URL"
    )

    # Environment
    CONTENTFORGE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    APP_URL: str = Field(
        default="http://localhost:3000", description="Public app URL sent as OpenRouter referer"
    )

    # Research configuration
    PERPLEXITY_MODEL: str = Field(default="sonar", description="Perplexity model for research")
    EXTRACTION_MODEL: str = Field(
        default="openai/gpt-4o-mini", description="OpenRouter model for JSON extraction"
    )
    MAX_REPORT_CHARS: int = Field(
        default=12000, description="Max report characters sent for AI extraction"
    )
    PROFILE_DEFAULT_OVERRIDES: dict[str, str] = Field(
        default_factory=dict,
        description="Overrides for default profile scalars, e.g. {\"industry\": \"SaaS\"}",
    )

    # Content generation configuration
    CONTENT_MODEL: str = Field(default="openai/gpt-4o-mini", description="Model for content")
    CONTENT_MAX_TOKENS: int = Field(default=1000, description="Max tokens for generated content")
    CONTENT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for content")
    CONTENT_SYSTEM_PROMPT: str = Field(
        default=(
            "You are a professional content creator who generates high-quality, engaging "
            "content for various social media platforms and blogs."
        ),
        description="System prompt for content generation",
    )
    TOPICS_MODEL: str = Field(default="openai/gpt-4o", description="Model for topic suggestions")
    VOICE_MODEL: str = Field(
        default="openai/gpt-4o-mini", description="Model for brand voice derivation"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
