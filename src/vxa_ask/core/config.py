"""
Configuration management for VXA Ask.

This module handles loading of environment variables, record store
credentials and the per-handler defaults used by the query router.
"""

import logging
from functools import lru_cache
from typing import Optional
from enum import Enum
from pathlib import Path

import dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configure logging
logger = logging.getLogger(__name__)

# Load .env file if it exists
dotenv.load_dotenv()

class EnvironmentType(str, Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    """Standard log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class StoreBackend(str, Enum):
    """Supported record store backends."""
    MEMORY = "memory"
    REST = "rest"

class ApplicationSettings(BaseSettings):
    """General application settings."""
    environment: EnvironmentType = EnvironmentType.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    log_dir: Optional[Path] = None
    sentry_dsn: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

class StoreSettings(BaseSettings):
    """Record store connection settings."""
    backend: StoreBackend = StoreBackend.MEMORY
    url: Optional[str] = None
    api_key: Optional[SecretStr] = None
    timeout: int = Field(30, ge=1)
    mock_data_path: Optional[Path] = None

    model_config = SettingsConfigDict(env_prefix="STORE_", case_sensitive=False, extra="ignore")

class RouterSettings(BaseSettings):
    """Defaults applied by intent handlers when a filter is not specified."""
    max_rows: int = Field(50, ge=1)
    silent_days: int = Field(14, ge=1)
    health_days: int = Field(30, ge=1)
    min_deal_value: float = Field(1000.0, ge=0)
    default_stage: str = "negotiating"
    default_recruit_stage: str = "interview"

    model_config = SettingsConfigDict(env_prefix="ROUTER_", case_sensitive=False, extra="ignore")

class Settings(BaseSettings):
    """Main application settings container."""
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    router: RouterSettings = Field(default_factory=RouterSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8",
                                      case_sensitive=False, extra="ignore")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        try:
            return cls()
        except Exception as e:
            logger.error(f"Failed to load configuration: {str(e)}")
            raise

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the application settings."""
    return Settings.from_env()
