"""Configuration management for the growth advisor."""

import logging
from typing import Optional

from pydantic import AliasChoices, Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


SUPPORTED_PROVIDERS = ("gemini", "claude")
SUPPORTED_BACKENDS = ("sqlite", "memory")


class LLMConfig(BaseSettings):
    """Generation service settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    provider: Optional[str] = Field(None, validation_alias="ADVISOR_LLM_PROVIDER")
    gemini_api_key: Optional[str] = Field(None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"))
    anthropic_api_key: Optional[str] = Field(None, validation_alias="ANTHROPIC_API_KEY")
    model: Optional[str] = Field(None, validation_alias="ADVISOR_LLM_MODEL")
    temperature: float = Field(0.7, validation_alias="ADVISOR_LLM_TEMPERATURE")
    max_tokens: Optional[int] = Field(None, validation_alias="ADVISOR_LLM_MAX_TOKENS")
    request_timeout: float = Field(60.0, validation_alias="ADVISOR_REQUEST_TIMEOUT")

    @validator("provider")
    def validate_provider(cls, v):
        """Provider must be one we have a client for."""
        if v is None:
            return v
        v = v.lower()
        if v not in SUPPORTED_PROVIDERS:
            raise ValueError(f"provider must be one of {', '.join(SUPPORTED_PROVIDERS)}")
        return v

    @validator("temperature")
    def validate_temperature(cls, v):
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")
        return v

    def resolved_provider(self) -> Optional[str]:
        """The explicit provider, else the first one with a credential."""
        if self.provider:
            return self.provider
        if self.gemini_api_key:
            return "gemini"
        if self.anthropic_api_key:
            return "claude"
        return None

    def api_key_for(self, provider: str) -> Optional[str]:
        if provider == "gemini":
            return self.gemini_api_key
        if provider == "claude":
            return self.anthropic_api_key
        return None


class StorageConfig(BaseSettings):
    """Local persistence settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    backend: str = Field("sqlite", validation_alias="ADVISOR_STORAGE_BACKEND")
    path: str = Field(".growth_advisor/state.sqlite3", validation_alias="ADVISOR_STATE_PATH")

    @validator("backend")
    def validate_backend(cls, v):
        v = v.lower()
        if v not in SUPPORTED_BACKENDS:
            raise ValueError(f"backend must be one of {', '.join(SUPPORTED_BACKENDS)}")
        return v


class AppConfig(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    name: str = Field("growth-advisor", validation_alias="ADVISOR_APP_NAME")
    version: str = Field(__version__, validation_alias="ADVISOR_APP_VERSION")
    log_level: str = Field("INFO", validation_alias="ADVISOR_LOG_LEVEL")
    log_file: Optional[str] = Field(None, validation_alias="ADVISOR_LOG_FILE")
    debug: bool = Field(False, validation_alias="ADVISOR_DEBUG")
    prompt_templates_dir: Optional[str] = Field(None, validation_alias="ADVISOR_PROMPT_TEMPLATES_DIR")
    data_file: Optional[str] = Field(None, validation_alias="ADVISOR_DATA_FILE")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Log level must be a standard logging level name."""
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, else the configured level."""
        return "DEBUG" if self.debug else self.log_level


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    llm: LLMConfig = Field(default_factory=LLMConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    app: AppConfig = Field(default_factory=AppConfig)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment."""
        return cls()
