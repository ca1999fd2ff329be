"""Configuration management for Trello Monitor."""

import os
from typing import Optional

import toml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .utils.error_handling import ConfigurationError


def _expand(value: str) -> str:
    return os.path.expanduser(os.path.expandvars(value))


class TrelloConfig(BaseModel):
    """Configuration for the Trello API."""

    api_key: Optional[str] = Field(default=None, description="Trello API key")
    token: Optional[str] = Field(default=None, description="Trello API token")
    api_url: str = Field(default="https://api.trello.com/1")
    timeout_seconds: float = Field(default=10.0, gt=0, le=300)
    max_attempts: int = Field(
        default=4,
        ge=1,
        le=10,
        description="Attempts per request for rate-limit and server errors",
    )


class CacheConfig(BaseModel):
    """Configuration for the staleness cache."""

    directory: str = Field(default=".cache", description="Directory holding cache entries")
    lifetime_hours: float = Field(
        default=24,
        gt=0,
        description="Entries older than this are discarded",
    )
    stale_after_minutes: float = Field(
        default=60,
        ge=0,
        description="Entries older than this are refreshed in the background",
    )

    @field_validator("directory")
    @classmethod
    def expand_path(cls, v):
        """Expand user paths and environment variables."""
        return _expand(v)

    @property
    def lifetime_ms(self) -> int:
        return int(self.lifetime_hours * 3_600_000)

    @property
    def stale_after_ms(self) -> int:
        return int(self.stale_after_minutes * 60_000)


class OutputConfig(BaseModel):
    """Configuration for the CSV output."""

    csv_path: str = Field(default="card_movements.csv")

    @field_validator("csv_path")
    @classmethod
    def expand_path(cls, v):
        """Expand user paths and environment variables."""
        return _expand(v)


class SheetsConfig(BaseModel):
    """Configuration for Google Sheets output."""

    credentials_file: str = Field(
        default="credentials.json",
        description="Service account key file",
    )
    sheet_name: str = Field(default="Sheet1")

    @field_validator("credentials_file")
    @classmethod
    def expand_path(cls, v):
        """Expand user paths and environment variables."""
        return _expand(v)


class Config(BaseModel):
    """Main configuration class."""

    trello: TrelloConfig = Field(default_factory=TrelloConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class ConfigManager:
    """Manages configuration loading and access."""

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = ".env"):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, searches standard locations.
            env_file: Dotenv file loaded before reading credentials
        """
        self.config_path = config_path or self._find_config_file()
        self.env_file = env_file
        self._config: Optional[Config] = None

    def _find_config_file(self) -> str:
        """Find configuration file in standard locations."""
        search_paths = [
            os.path.expanduser("~/.config/trello-monitor/config.toml"),
            "config.toml",
            "trello_monitor.toml",
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        # Return default path even if it doesn't exist
        return search_paths[0]

    @property
    def config(self) -> Config:
        """Get configuration, loading if necessary."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> Config:
        """Load configuration from TOML file and environment."""
        if self.env_file:
            load_dotenv(self.env_file)

        config_data = {}
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, "r") as f:
                    config_data = toml.load(f)
            except toml.TomlDecodeError as e:
                raise ConfigurationError(f"Invalid configuration file {self.config_path}: {e}")

        try:
            config = Config(**config_data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration file {self.config_path}: {e}")

        # Environment wins over the file for credentials
        api_key = os.getenv("TRELLO_API_KEY")
        token = os.getenv("TRELLO_TOKEN")
        if api_key:
            config.trello.api_key = api_key
        if token:
            config.trello.token = token

        return config

    def reload(self):
        """Reload configuration."""
        self._config = None


# Global configuration manager instance
config_manager = ConfigManager()
