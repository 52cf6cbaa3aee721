"""Settings, logging setup and the exception hierarchy."""

from config.exceptions import (
    SagaScriptError,
    ResilienceError,
    RetryCancelledError,
    OfflineNoCacheError,
    StorageError,
    APIError,
    APIConnectionError,
    APITimeoutError,
    APIResponseError,
    ValidationError,
    InvalidConfigError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "SagaScriptError",
    "ResilienceError",
    "RetryCancelledError",
    "OfflineNoCacheError",
    "StorageError",
    "APIError",
    "APIConnectionError",
    "APITimeoutError",
    "APIResponseError",
    "ValidationError",
    "InvalidConfigError",
]
