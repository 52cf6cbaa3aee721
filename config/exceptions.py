"""Custom exception hierarchy for the SagaScript resilience layer."""

from typing import Optional


class SagaScriptError(Exception):
    """Base exception for all SagaScript errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Resilience Errors ----

class ResilienceError(SagaScriptError):
    """Base exception for retry and offline-cache errors."""


class RetryCancelledError(ResilienceError):
    """A retry loop was aborted through its cancel event."""

    def __init__(self, attempts: int, message: str = "Retry cancelled"):
        super().__init__(message, {"attempts": attempts})
        self.attempts = attempts


class OfflineNoCacheError(ResilienceError):
    """Offline and no valid cached value exists for the requested resource."""

    def __init__(
        self,
        cache_key: str = "",
        message: str = "No internet connection and no cached data available",
    ):
        super().__init__(message, {"cache_key": cache_key} if cache_key else None)
        self.cache_key = cache_key


# ---- Storage Errors ----

class StorageError(SagaScriptError):
    """Persistent key-value store operation failed."""


# ---- API Errors ----

class APIError(SagaScriptError):
    """Base exception for SagaScript API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__(message, details)
        self.status_code = status_code


class APIConnectionError(APIError):
    """Could not reach the SagaScript API."""


class APITimeoutError(APIError):
    """SagaScript API request timed out."""


class APIResponseError(APIError):
    """SagaScript API answered with a non-success status."""


# ---- Validation Errors ----

class ValidationError(SagaScriptError):
    """Input validation failed."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""
