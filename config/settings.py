"""Configuration settings loaded from .env file."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

CACHE_BACKENDS = ("sqlite", "json", "memory")


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Retry delays are in seconds; cache TTLs are in milliseconds to match
    the persisted cache entry format.
    """

    # API
    api_base_url: str = "http://localhost:5000"
    api_timeout: float = 30.0

    # Retry
    retry_max_attempts: int = 3
    retry_delay: float = 1.0
    retry_backoff: bool = True

    # Offline cache
    cache_backend: str = "sqlite"
    cache_store_path: Path = Path("./data/offline_cache.db")
    cache_default_ttl_ms: int = 1000 * 60 * 5

    # Connectivity
    enable_notifications: bool = True
    connectivity_check_interval: float = 30.0

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("retry_max_attempts must be >= 1")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retry_delay must be non-negative")
        return v

    @field_validator("cache_default_ttl_ms")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_default_ttl_ms must be positive")
        return v

    @field_validator("api_timeout", "connectivity_check_interval")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Interval must be positive")
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in CACHE_BACKENDS:
            raise ValueError(f"cache_backend must be one of {', '.join(CACHE_BACKENDS)}")
        return v

    @field_validator("cache_store_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
