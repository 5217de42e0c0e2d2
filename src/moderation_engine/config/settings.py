"""Application settings for the moderation engine."""

import os

from pydantic import BaseModel
from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from moderation_engine.config.database import DatabaseSettings
from moderation_engine.config.redis import RedisSettings


class AgentModelConfig(BaseModel):
    """Configuration for a specific agent's model."""

    provider: str = Field(
        description="Provider to use for this agent (anthropic, openai, google, groq)"
    )
    model: str = Field(description="Model name to use for this agent")
    max_tokens: int = Field(default=1000, description="Maximum tokens for responses")
    temperature: float = Field(default=0.0, description="Temperature (0.0-1.0)")
    api_key: str | None = Field(
        default=None, description="API key for this provider (optional)"
    )


class LLMSettings(BaseModel):
    """LLM configuration settings."""

    # Default provider and model configuration
    provider: str = Field(
        default="openai",
        description="Default provider (anthropic, openai, google, groq)",
    )
    model: str = Field(default="gpt-4o", description="Default model name")
    max_tokens: int = Field(
        default=1000, description="Default maximum tokens for LLM responses"
    )
    temperature: float = Field(
        default=0.0, description="Default temperature for LLM responses (0.0-1.0)"
    )

    # Provider-specific API keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key for Claude models",
    )
    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="OpenAI API key",
    )
    google_api_key: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_API_KEY", ""),
        description="Google API key for Gemini models",
    )
    groq_api_key: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_KEY", ""),
        description="Groq API key",
    )

    # Content analysis agent
    analysis_provider: str = Field(
        default="", description="Provider for analysis agent (uses default if empty)"
    )
    analysis_model: str = Field(
        default="", description="Model for analysis agent (uses default if empty)"
    )
    analysis_max_tokens: int = Field(
        default=250, description="Max tokens for analysis (uses default if 0)"
    )

    # Moderator assist agent
    assist_provider: str = Field(
        default="", description="Provider for assist agent (uses default if empty)"
    )
    assist_model: str = Field(
        default="", description="Model for assist agent (uses default if empty)"
    )
    assist_max_tokens: int = Field(
        default=0, description="Max tokens for assist (uses default if 0)"
    )
    assist_temperature: float = Field(
        default=-1.0, description="Temperature for assist (uses default if -1)"
    )

    analysis_timeout: float = Field(
        default=30.0, description="Timeout for analyzer requests in seconds"
    )

    def get_provider_api_key(self, provider: str) -> str:
        """Get API key for a specific provider."""
        provider_keys = {
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
            "google": self.google_api_key,
            "groq": self.groq_api_key,
        }
        return provider_keys.get(provider, "")

    def get_agent_config(self, agent_type: str) -> AgentModelConfig:
        """Get configuration for a specific agent type."""
        if agent_type == "analysis":
            provider = self.analysis_provider or self.provider
            return AgentModelConfig(
                provider=provider,
                model=self.analysis_model or self.model,
                max_tokens=self.analysis_max_tokens or self.max_tokens,
                temperature=0.0,
                api_key=self.get_provider_api_key(provider),
            )
        if agent_type == "assist":
            provider = self.assist_provider or self.provider
            return AgentModelConfig(
                provider=provider,
                model=self.assist_model or self.model,
                max_tokens=self.assist_max_tokens or self.max_tokens,
                temperature=self.assist_temperature
                if self.assist_temperature >= 0
                else self.temperature,
                api_key=self.get_provider_api_key(provider),
            )
        # Default configuration
        return AgentModelConfig(
            provider=self.provider,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            api_key=self.get_provider_api_key(self.provider),
        )


class ModerationSettings(BaseModel):
    """Moderation policy settings."""

    auto_reject_threshold: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Flagged content scoring above this is rejected without review",
    )
    max_conflict_retries: int = Field(
        default=1,
        ge=0,
        description="Re-read and retry attempts after a concurrent write conflict",
    )
    reputation_penalty_points: int = Field(
        default=5,
        ge=0,
        description="Points revoked from an author when their content is rejected",
    )
    event_channel: str = Field(
        default="moderation:flags",
        description="Redis channel for rejected-flag notifications",
    )
    reanalysis_delay_seconds: int = Field(
        default=300,
        ge=0,
        description="Delay before re-analysing content whose analysis failed",
    )
    analysis_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound in seconds on any analyzer call made by the service",
    )


class AppSettings(BaseSettings):
    """Main application settings."""

    log_level: str = Field(default="INFO", description="Root log level")

    # Component settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    moderation: ModerationSettings = Field(default_factory=ModerationSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
    )


# Global settings instance
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get application settings (singleton pattern)."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = AppSettings()
    return _settings


def get_llm_settings() -> LLMSettings:
    """Get LLM settings."""
    return get_settings().llm


def get_moderation_settings() -> ModerationSettings:
    """Get moderation policy settings."""
    return get_settings().moderation
