import logging
from typing import Any, Mapping

import httpx

from toolrelay.config.schema import HttpConfig

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """An upstream service answered with an error or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeout(UpstreamError):
    """An upstream service did not answer within the configured timeout."""


class HttpClientService:
    """Shared async HTTP client for tools that call out to upstream APIs."""

    def __init__(
        self,
        config: HttpConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds, connect=config.connect_timeout_seconds),
            headers={"User-Agent": config.user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _get(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> httpx.Response:
        logger.debug(f"Sending GET request to: {url}")
        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"HTTP request timed out: {url}")
            raise UpstreamTimeout(f"Request to {url} timed out") from e
        except httpx.RequestError as e:
            logger.error(f"HTTP request failed: {e}")
            raise UpstreamError(f"Failed to complete HTTP request: {e}") from e

        if not response.is_success:
            logger.error(f"HTTP request failed with status {response.status_code}")
            raise UpstreamError(
                f"HTTP request failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.debug(f"Received response: {response.status_code}")
        return response

    async def get_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._get(url, params, headers)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Malformed JSON in response from {url}", status_code=response.status_code
            ) from e

    async def get_text(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[str, str]:
        """Fetch ``url`` and return ``(content_type, text)``."""
        response = await self._get(url, None, headers)
        return response.headers.get("content-type", ""), response.text
