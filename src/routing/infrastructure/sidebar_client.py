import asyncio
import json
import time
from typing import Any

import aiohttp
from aiohttp import (
    ClientConnectorError,
    ClientPayloadError,
    ClientResponseError,
    ContentTypeError,
    ServerDisconnectedError,
)
from src.config.logger_config import logger

SIDEBAR_ENDPOINT = "/api/plugin/combine/sidebar"


class SidebarApiClient:
    """Fetches the procedure taxonomy ("sidebar") from the gallery API."""

    def __init__(
        self,
        base_url: str = "https://app.bragbookgallery.com",
        run_id: str | None = None,
        timeout_seconds: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.run_id = run_id
        self.timeout_seconds = timeout_seconds

    async def fetch_sidebar(
        self,
        session: aiohttp.ClientSession,
        api_tokens: list[str],
        retries: int = 3,
    ) -> dict[str, Any] | None:
        tokens = [token.strip() for token in api_tokens if token and token.strip()]
        if not tokens:
            logger.error("No valid API tokens provided for sidebar request")
            return None

        data = await self._post(session, SIDEBAR_ENDPOINT, {"apiTokens": tokens}, retries=retries)
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.error("Sidebar response is {}, expected object", type(data).__name__)
            return None
        if data.get("success") is False or "error" in data:
            logger.error("Sidebar API error: {}", data.get("error") or data.get("message"))
            return None
        categories = data.get("data")
        logger.info(
            "Sidebar fetched: {} categories",
            len(categories) if isinstance(categories, list) else "no",
        )
        return data

    async def _post(
        self,
        session: aiohttp.ClientSession,
        endpoint: str,
        body: dict[str, Any],
        retries: int = 3,
    ) -> Any | None:
        url = f"{self.base_url}{endpoint}"
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds, connect=10)
        for attempt in range(1, retries + 1):
            started = time.monotonic()
            try:
                async with session.post(url, json=body, timeout=timeout) as resp:
                    if resp.status >= 500 or resp.status == 429:
                        logger.warning("Server error {}. Attempt {}/{}", resp.status, attempt, retries)
                        raise ClientResponseError(
                            resp.request_info,
                            resp.history,
                            status=resp.status,
                            message="Server Error",
                        )

                    if resp.status != 200:
                        text = await resp.text()
                        self._log_attempt(endpoint, attempt, started, "http_error", status=resp.status)
                        logger.error("HTTP {} from {}: {}", resp.status, endpoint, text[:200])
                        return None

                    try:
                        data = await resp.json()
                    except (ContentTypeError, json.JSONDecodeError, ValueError) as exc:
                        self._log_attempt(endpoint, attempt, started, "invalid_json", status=resp.status)
                        if attempt == retries:
                            logger.error("Failed after {} attempts. Error: {}", retries, exc)
                            return None
                        wait_time = 2**attempt
                        logger.warning("Invalid JSON from {} ({}). Retrying in {}s...", endpoint, exc, wait_time)
                        await asyncio.sleep(wait_time)
                        continue

                    self._log_attempt(endpoint, attempt, started, "success", status=resp.status)
                    return data

            except (
                ClientResponseError,
                ClientConnectorError,
                ServerDisconnectedError,
                asyncio.TimeoutError,
                ClientPayloadError,
            ) as exc:
                self._log_attempt(endpoint, attempt, started, "retryable_error", status=getattr(exc, "status", None))
                if attempt == retries:
                    logger.error("Failed after {} attempts. Error: {}", retries, exc)
                    return None
                wait_time = 2**attempt
                logger.warning("Connection unstable ({}). Retrying in {}s...", exc, wait_time)
                await asyncio.sleep(wait_time)
            except Exception as exc:
                self._log_attempt(endpoint, attempt, started, "fatal_error")
                logger.error("Unexpected error while fetching {}: {}", endpoint, exc)
                return None

        return None

    def _log_attempt(
        self,
        endpoint: str,
        attempt: int,
        started: float,
        outcome: str,
        *,
        status: int | None = None,
    ) -> None:
        # request bodies carry API tokens; only the outcome is logged
        logger.debug(
            "[{}] {} attempt {} -> {} (status={}, {:.0f} ms)",
            self.run_id or "-",
            endpoint,
            attempt,
            outcome,
            status,
            (time.monotonic() - started) * 1000,
        )
