"""Async HTTP client for the SagaScript REST API."""

import logging
from typing import Any, Optional

import httpx

from config.exceptions import (
    APIConnectionError,
    APIResponseError,
    APITimeoutError,
)
from config.settings import Settings

logger = logging.getLogger(__name__)


class SagaScriptClient:
    """Thin httpx wrapper returning decoded JSON.

    Transport failures surface as APIConnectionError / APITimeoutError and
    non-2xx answers as APIResponseError, so callers can retry them uniformly.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self.base_url = (base_url or self.settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.settings.api_timeout,
            headers={"Accept": "application/json", **(headers or {})},
            transport=transport,
        )
        self.total_calls = 0

    async def __aenter__(self) -> "SagaScriptClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET ``path`` and decode the JSON body.

        Raises:
            APITimeoutError: The request timed out.
            APIConnectionError: The server could not be reached.
            APIResponseError: Non-2xx status or a body that is not JSON.
        """
        self.total_calls += 1
        logger.debug("GET %s params=%s", path, params)
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise APITimeoutError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise APIConnectionError(f"Request to {path} failed: {e}") from e

        logger.debug("GET %s -> %d", path, response.status_code)
        if response.is_error:
            raise APIResponseError(_error_message(response, path), status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise APIResponseError(
                f"Invalid JSON from {path}", status_code=response.status_code
            ) from e

    async def ping(self) -> bool:
        """Connectivity probe: any HTTP answer means the network is up."""
        try:
            await self._client.head("/")
        except httpx.HTTPError as e:
            logger.debug("Ping failed: %s", e)
            return False
        return True

    # ---- Resources ----

    async def get_profile(self) -> dict:
        return await self.get_json("/api/profile")

    async def get_recent_activity(self) -> list:
        return await self.get_json("/api/profile/recent-activity")

    async def get_plan_usage(self) -> dict:
        return await self.get_json("/api/user/usage")

    async def get_subscription(self) -> dict:
        return await self.get_json("/api/user/subscription")

    async def get_subscription_plan(self, plan_id: int | str) -> dict:
        return await self.get_json(f"/api/subscription-plans/{plan_id}")

    async def get_user_stats(self) -> dict:
        return await self.get_json("/api/user-stats")

    async def get_writing_stats(
        self,
        period: str = "week",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list:
        params: dict[str, Any] = {"period": period}
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date
        return await self.get_json("/api/writing-stats", params=params)


def _error_message(response: httpx.Response, path: str) -> str:
    """Prefer the server's ``message`` field over a generic status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"GET {path} failed with status {response.status_code}"
