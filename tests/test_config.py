"""Tests for configuration loading."""

import pytest

from trello_monitor.config import Config, ConfigManager
from trello_monitor.utils.error_handling import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so values loaded from .env files are undone after each test
    for name in ("TRELLO_API_KEY", "TRELLO_TOKEN"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults_when_file_missing(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "missing.toml"), env_file=None)

        config = manager.config

        assert config == Config()
        assert config.cache.lifetime_ms == 86_400_000
        assert config.cache.stale_after_ms == 3_600_000
        assert config.output.csv_path == "card_movements.csv"

    def test_loads_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[cache]\ndirectory = "/tmp/tm-cache"\nlifetime_hours = 2\nstale_after_minutes = 15\n'
            '[output]\ncsv_path = "out.csv"\n'
            '[trello]\napi_key = "file-key"\ntoken = "file-token"\n'
        )

        config = ConfigManager(str(path), env_file=None).config

        assert config.cache.directory == "/tmp/tm-cache"
        assert config.cache.lifetime_ms == 7_200_000
        assert config.cache.stale_after_ms == 900_000
        assert config.output.csv_path == "out.csv"
        assert config.trello.api_key == "file-key"

    def test_environment_overrides_file_credentials(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text('[trello]\napi_key = "file-key"\ntoken = "file-token"\n')
        monkeypatch.setenv("TRELLO_API_KEY", "env-key")

        config = ConfigManager(str(path), env_file=None).config

        assert config.trello.api_key == "env-key"
        assert config.trello.token == "file-token"

    def test_dotenv_file_loaded(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TRELLO_API_KEY=dotenv-key\nTRELLO_TOKEN=dotenv-token\n")

        config = ConfigManager(str(tmp_path / "missing.toml"), env_file=str(env_file)).config

        assert config.trello.api_key == "dotenv-key"
        assert config.trello.token == "dotenv-token"

    def test_expands_user_paths(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        path = tmp_path / "config.toml"
        path.write_text('[cache]\ndirectory = "~/trello-cache"\n')

        config = ConfigManager(str(path), env_file=None).config

        assert config.cache.directory == str(tmp_path / "trello-cache")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[cache\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration file"):
            ConfigManager(str(path), env_file=None).config

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[cache]\nlifetime_hours = 0\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(str(path), env_file=None).config
