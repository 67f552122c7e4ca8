"""
Client for the external Terabox resolution API
"""
import asyncio
import json
import logging
from functools import lru_cache
from typing import Any, Dict
from urllib.parse import quote

import aiohttp

from config import Config

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/114.0.0.0 Safari/537.36"
)


class ExternalApiError(RuntimeError):
    """Raised when the resolution API cannot produce a usable answer."""


class TeraboxApiClient:
    """Issues a single GET per lookup against the resolution API."""

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url
        self.timeout = timeout

    def build_url(self, url: str) -> str:
        separator = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{separator}url={quote(url, safe='')}"

    async def fetch(self, url: str) -> Dict[str, Any]:
        """
        Look up a share link and return the upstream JSON object.

        Transport errors, timeouts, HTTP error statuses and bodies that are not
        a JSON object all surface as ExternalApiError.
        """
        api_url = self.build_url(url)
        logger.debug(f"Querying resolution API: {api_url}")

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"}
            ) as session:
                async with session.get(api_url) as response:
                    body = await response.read()
                    status_code = response.status
        except asyncio.TimeoutError as e:
            raise ExternalApiError(f"timeout of {self.timeout:g}s exceeded") from e
        except aiohttp.ClientError as e:
            raise ExternalApiError(f"request failed: {e}") from e

        text_data = body.decode("utf-8", errors="replace")

        if status_code >= 400:
            raise ExternalApiError(
                f"resolution API responded with {status_code}: {text_data[:200]}"
            )

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ExternalApiError(f"invalid JSON from resolution API: {text_data[:200]}") from e

        if not isinstance(data, dict):
            raise ExternalApiError("resolution API returned a non-object JSON payload")
        return data


@lru_cache(maxsize=1)
def get_terabox_client() -> TeraboxApiClient:
    """FastAPI dependency returning the configured resolution client"""
    return TeraboxApiClient(Config.RESOLVER_API_URL, timeout=Config.RESOLVER_TIMEOUT)
