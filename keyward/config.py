"""keyward configuration management.

Configuration sources (in priority order):
1. Environment variables (KEYWARD_ prefix)
2. Config file (config.yaml)
3. Defaults
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Deployment-level configuration."""

    # Environment tag, used as the public key prefix ("<env>_...")
    env: str = "local"


class DatabaseConfig(BaseModel):
    """Database configuration."""

    # 可切换到 postgresql+asyncpg:// 或 mysql+asyncmy://
    url: str = "sqlite+aiosqlite:///./keyward.db"
    echo: bool = False


class ApiKeySeed(BaseModel):
    """A pre-shared key/secret pair seeded into the store on startup."""

    name: str
    key: str
    secret: str
    type: str = "default"


class ApiKeyConfig(BaseModel):
    """API key generation configuration."""

    key_length: int = Field(default=25, ge=1)
    secret_length: int = Field(default=35, ge=1)

    # Keys created via create_raw on worker startup if not already present
    seeds: list[ApiKeySeed] = Field(default_factory=list)


class SweepConfig(BaseModel):
    """Expiry sweep configuration."""

    enabled: bool = True
    run_on_startup: bool = True
    interval_seconds: int = Field(default=300, gt=0)  # 5 minutes


class Settings(BaseSettings):
    """keyward application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KEYWARD_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    app: AppConfig = Field(default_factory=AppConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    api_key: ApiKeyConfig = Field(default_factory=ApiKeyConfig)
    sweep: SweepConfig = Field(default_factory=SweepConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # File values arrive as init kwargs; environment variables win over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. KEYWARD_CONFIG_FILE environment variable
    2. ./config.yaml
    3. /etc/keyward/config.yaml
    """
    config_paths = [
        os.environ.get("KEYWARD_CONFIG_FILE"),
        Path("config.yaml"),
        Path("/etc/keyward/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Configuration is loaded from:
    1. YAML config file (if exists)
    2. Environment variables (override)
    3. Defaults
    """
    return Settings(**_load_config_file())
