"""Tests for configuration management."""

import os
import pytest
from unittest.mock import patch

from growth_advisor.config import AppConfig, LLMConfig, Settings, StorageConfig


def test_llm_config_defaults():
    """Test LLM configuration with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = LLMConfig(_env_file=None)
        assert config.provider is None
        assert config.temperature == 0.7
        assert config.request_timeout == 60.0
        assert config.resolved_provider() is None


def test_llm_config_from_env():
    """Test LLM configuration read from the environment."""
    with patch.dict(os.environ, {
        "ADVISOR_LLM_PROVIDER": "Claude",
        "ANTHROPIC_API_KEY": "claude-key",
        "ADVISOR_LLM_TEMPERATURE": "0.2",
        "ADVISOR_REQUEST_TIMEOUT": "15"
    }, clear=True):
        config = LLMConfig(_env_file=None)
        assert config.provider == "claude"
        assert config.temperature == 0.2
        assert config.request_timeout == 15.0
        assert config.api_key_for("claude") == "claude-key"
        assert config.api_key_for("gemini") is None


def test_llm_config_api_key_alias():
    """Test the API_KEY spelling of the Gemini credential."""
    with patch.dict(os.environ, {"API_KEY": "legacy-key"}, clear=True):
        config = LLMConfig(_env_file=None)
        assert config.gemini_api_key == "legacy-key"
        assert config.resolved_provider() == "gemini"


def test_llm_config_prefers_gemini_when_both_keys_set():
    """Test provider auto-selection order."""
    with patch.dict(os.environ, {
        "GEMINI_API_KEY": "gem-key",
        "ANTHROPIC_API_KEY": "claude-key"
    }, clear=True):
        assert LLMConfig(_env_file=None).resolved_provider() == "gemini"


def test_llm_config_invalid_provider():
    """Test unsupported provider name."""
    with patch.dict(os.environ, {"ADVISOR_LLM_PROVIDER": "openai"}, clear=True):
        with pytest.raises(ValueError, match="provider must be one of"):
            LLMConfig(_env_file=None)


def test_llm_config_invalid_temperature():
    """Test out-of-range temperature."""
    with patch.dict(os.environ, {"ADVISOR_LLM_TEMPERATURE": "3.5"}, clear=True):
        with pytest.raises(ValueError, match="temperature"):
            LLMConfig(_env_file=None)


def test_storage_config_defaults():
    """Test storage configuration with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = StorageConfig(_env_file=None)
        assert config.backend == "sqlite"
        assert config.path.endswith("state.sqlite3")


def test_storage_config_invalid_backend():
    """Test unsupported storage backend."""
    with patch.dict(os.environ, {"ADVISOR_STORAGE_BACKEND": "redis"}, clear=True):
        with pytest.raises(ValueError, match="backend must be one of"):
            StorageConfig(_env_file=None)


def test_app_config_defaults():
    """Test app configuration with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = AppConfig(_env_file=None)
        assert config.name == "growth-advisor"
        assert config.version == "0.1.0"
        assert config.log_level == "INFO"
        assert config.debug is False
        assert config.prompt_templates_dir is None


def test_app_config_log_level():
    """Test log level normalisation and validation."""
    with patch.dict(os.environ, {"ADVISOR_LOG_LEVEL": "debug"}, clear=True):
        assert AppConfig(_env_file=None).log_level == "DEBUG"

    with patch.dict(os.environ, {"ADVISOR_LOG_LEVEL": "chatty"}, clear=True):
        with pytest.raises(ValueError, match="Unknown log level"):
            AppConfig(_env_file=None)


def test_app_config_debug_forces_debug_log_level():
    """Test that debug mode raises logging to DEBUG."""
    with patch.dict(os.environ, {"ADVISOR_DEBUG": "true", "ADVISOR_LOG_LEVEL": "WARNING"}, clear=True):
        assert AppConfig(_env_file=None).effective_log_level() == "DEBUG"

    with patch.dict(os.environ, {"ADVISOR_LOG_LEVEL": "WARNING"}, clear=True):
        assert AppConfig(_env_file=None).effective_log_level() == "WARNING"


def test_settings_load():
    """Test loading the nested settings."""
    with patch.dict(os.environ, {
        "ADVISOR_STORAGE_BACKEND": "memory",
        "GEMINI_API_KEY": "gem-key"
    }, clear=True):
        settings = Settings.load()
        assert settings.storage.backend == "memory"
        assert settings.llm.resolved_provider() == "gemini"
        assert settings.app.name == "growth-advisor"
