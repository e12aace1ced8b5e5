"""
Async WakaTime API client with retry logic and error mapping.
"""
import logging
import asyncio
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import httpx
from workhours.utils.http import basic_auth_header, create_http_client
from workhours.integrations.wakatime_types import (
    ProjectSummary,
    WakaTimeProject,
    WakaTimeUser,
    summarize_project,
)
from workhours.config import settings

logger = logging.getLogger(__name__)


class WakaTimeAPIError(Exception):
    """Base exception for WakaTime API errors."""
    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _api_date(value) -> str:
    """WakaTime wants plain YYYY-MM-DD."""
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()[:10]


class WakaTimeClient:
    """Async WakaTime API client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.WAKATIME_BASE_URL).rstrip("/")
        self.api_key = api_key or settings.WAKATIME_API_KEY
        self.timeout = timeout if timeout is not None else settings.WAKATIME_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else settings.WAKATIME_MAX_RETRIES

        if not self.api_key:
            raise ValueError("A WakaTime API key is required (WAKATIME_API_KEY or X-WakaTime-Key)")

    async def _request(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        not_found_message: str = "Resource not found",
    ) -> Any:
        """
        GET with exponential backoff on 429, 5xx and timeouts.
        Maps errors to WakaTimeAPIError with appropriate codes.
        """
        url = f"{self.base_url}{path}"
        headers = {"Authorization": basic_auth_header(self.api_key)}

        last_exception = None
        for attempt in range(self.max_retries):
            delay = (2 ** attempt) * 0.5
            retries_left = attempt < self.max_retries - 1
            try:
                async with create_http_client(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers, params=params)

                if response.status_code == 429:
                    logger.warning(
                        f"WakaTime rate limit hit, retrying in {delay}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    if retries_left:
                        await asyncio.sleep(delay)
                        continue
                    raise WakaTimeAPIError(
                        "rate_limited",
                        "Rate limit exceeded. Please wait a few minutes and try again.",
                        429,
                    )

                if response.status_code >= 500:
                    logger.warning(
                        f"WakaTime server error {response.status_code}, retrying in {delay}s"
                    )
                    if retries_left:
                        await asyncio.sleep(delay)
                        continue
                    raise WakaTimeAPIError(
                        "upstream_error",
                        f"WakaTime server error: {response.status_code}",
                        response.status_code,
                    )

                if response.status_code == 401:
                    raise WakaTimeAPIError(
                        "unauthorized",
                        "Invalid API key. Please check your WakaTime API key.",
                        401,
                    )

                if response.status_code == 404:
                    raise WakaTimeAPIError("not_found", not_found_message, 404)

                if response.status_code >= 400:
                    raise WakaTimeAPIError(
                        "validation_error",
                        f"API error: {response.status_code} {response.reason_phrase}",
                        response.status_code,
                    )

                return response.json()

            except WakaTimeAPIError:
                raise
            except httpx.TimeoutException as e:
                last_exception = e
                logger.warning(
                    f"WakaTime timeout on attempt {attempt + 1}/{self.max_retries}"
                )
                if retries_left:
                    await asyncio.sleep(delay)
                    continue
            except httpx.HTTPError as e:
                last_exception = e
                logger.error(f"WakaTime API call failed: {e}")
                if retries_left:
                    await asyncio.sleep(delay)
                    continue

        raise WakaTimeAPIError(
            "upstream_error",
            f"Request failed after {self.max_retries} attempts",
            502,
        ) from last_exception

    async def get_current_user(self) -> WakaTimeUser:
        data = await self._request("/users/current")
        return WakaTimeUser(**data.get("data", {}))

    async def validate_api_key(self) -> bool:
        """True when the key is accepted; other failures propagate."""
        try:
            await self._request("/users/current")
        except WakaTimeAPIError as e:
            if e.code == "unauthorized":
                return False
            raise
        return True

    async def list_projects(self) -> List[str]:
        """Names of the user's projects."""
        data = await self._request("/users/current/projects")
        return [WakaTimeProject(**p).name for p in data.get("data", [])]

    async def fetch_summary(self, project_name: str, start, end) -> Dict[str, Any]:
        """Raw per-day summaries for one project."""
        return await self._request(
            "/users/current/summaries",
            params={
                "start": _api_date(start),
                "end": _api_date(end),
                "project": project_name,
            },
            not_found_message=f'Project "{project_name}" not found.',
        )

    async def get_project_data(
        self, project_name: str, start, end
    ) -> Tuple[ProjectSummary, Dict[str, float]]:
        """Fetch and summarize; also returns the hours-per-day breakdown."""
        summary = await self.fetch_summary(project_name, start, end)
        result = summarize_project(summary, project_name)
        return result, result.daily
