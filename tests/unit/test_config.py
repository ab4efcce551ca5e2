"""
Unit tests for configuration loading.

Tests ConfigLoader layering: default.yaml, then {HARKA_ENV}.yaml, then
environment variables.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from harka import config as config_module
from harka.config import ConfigLoader, HarkaConfig

REPO_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"

ENV_VARS = (
    "HARKA_ENV",
    "HARKA_LOG_LEVEL",
    "HARKA_ADMIN_TOKEN",
    "HARKA_API_URL",
    "HARKA_API_TIMEOUT",
    "HARKA_BACKUP_BACKEND",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_ANON_KEY",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def config_dir(tmp_path):
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "default.yaml").write_text(
        "log_level: INFO\n"
        "api_client:\n"
        "  base_url: http://default.test/api\n"
        "  timeout: 30\n"
        "backup:\n"
        "  max_age_days: 30\n"
    )
    (directory / "staging.yaml").write_text(
        "log_level: WARNING\n"
        "api_client:\n"
        "  timeout: 10\n"
    )
    return directory


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_defaults_without_files(self, clean_env, tmp_path):
        config = ConfigLoader(str(tmp_path / "missing")).get()
        assert config.environment == "development"
        assert config.backup.backend == "memory"
        assert config.api_client.max_attempts == 3
        assert config.admin_token == ""

    def test_environment_file_overrides_default(self, clean_env, config_dir):
        clean_env.setenv("HARKA_ENV", "staging")
        config = ConfigLoader(str(config_dir)).get()

        assert config.environment == "staging"
        assert config.log_level == "WARNING"
        assert config.api_client.timeout == 10
        # Sections merge rather than replace
        assert config.api_client.base_url == "http://default.test/api"

    def test_env_vars_override_files(self, clean_env, config_dir):
        clean_env.setenv("HARKA_ENV", "staging")
        clean_env.setenv("HARKA_LOG_LEVEL", "debug")
        clean_env.setenv("HARKA_ADMIN_TOKEN", "t0ken")
        clean_env.setenv("HARKA_API_URL", "http://env.test/api")
        clean_env.setenv("HARKA_API_TIMEOUT", "2.5")
        clean_env.setenv("HARKA_BACKUP_BACKEND", "supabase")
        clean_env.setenv("SUPABASE_URL", "https://project.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "anon")

        config = ConfigLoader(str(config_dir)).get()

        assert config.log_level == "DEBUG"
        assert config.admin_token == "t0ken"
        assert config.api_client.base_url == "http://env.test/api"
        assert config.api_client.timeout == 2.5
        assert config.backup.backend == "supabase"
        assert config.backup.max_age_days == 30
        assert config.supabase.url == "https://project.supabase.co"
        assert config.supabase.key == "anon"

    def test_invalid_backend_is_rejected(self, clean_env, config_dir):
        clean_env.setenv("HARKA_BACKUP_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            ConfigLoader(str(config_dir))

    def test_broken_yaml_is_ignored(self, clean_env, config_dir):
        (config_dir / "default.yaml").write_text("api_client: [unclosed\n")
        config = ConfigLoader(str(config_dir)).get()
        assert config.api_client.base_url == "http://localhost:8001/api"

    def test_shipped_development_config(self, clean_env, caplog):
        with caplog.at_level(logging.WARNING, logger="harka.config"):
            config = ConfigLoader(str(REPO_CONFIG_DIR)).get()

        assert config.environment == "development"
        assert config.log_level == "DEBUG"
        assert config.backup.backend == "memory"
        assert "Config file not found" not in caplog.text

    def test_reload_picks_up_changes(self, clean_env, config_dir):
        loader = ConfigLoader(str(config_dir))
        clean_env.setenv("HARKA_ADMIN_TOKEN", "rotated")
        assert loader.reload().admin_token == "rotated"


class TestGlobalConfig:
    """Tests for get_config / initialize_config."""

    def test_initialize_then_get(self, clean_env, config_dir, monkeypatch):
        monkeypatch.setattr(config_module, "_global_config_loader", None)
        initialized = config_module.initialize_config(str(config_dir))
        assert config_module.get_config() is initialized
        assert isinstance(initialized, HarkaConfig)
