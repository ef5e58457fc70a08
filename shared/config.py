"""
Centralized configuration for the RechargeEarn client.

All settings are loaded from environment variables (prefix ``RECHARGE_``)
with sensible defaults. Only ``api_url`` changes where requests go; the rest
tune the local store, the landing server and logging.
"""

from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "https://recharge-earn-be.vercel.app/api/v1"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RECHARGE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RechargeEarn"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "WARNING"

    # Backend REST API
    api_url: str = DEFAULT_API_URL

    # Where share links point and where the gateway sends users back
    frontend_url: str = "http://localhost:3000"

    # Durable client storage
    storage_path: Path = Path.home() / ".rechargeearn" / "storage.json"

    # Payment landing server
    host: str = "127.0.0.1"
    port: int = 3000
    reload: bool = False


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
