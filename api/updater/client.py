"""HTTP client for the remote metadata file."""

import asyncio
import logging
from typing import Tuple

import aiohttp

from api.constants import REQUEST_TIMEOUT, USER_AGENT
from api.updater.errors import TransportError

logger = logging.getLogger(__name__)


class MetadataClient:
    """Fetches raw file contents from the GitHub contents API."""

    ACCEPT = "application/vnd.github.v3.raw"

    def __init__(self, timeout: float = REQUEST_TIMEOUT, user_agent: str = USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    async def get(self, url: str) -> Tuple[int, bytes]:
        """GET ``url`` and return ``(status, raw body)``.

        The body is left undecoded; callers decide what a usable body is.

        Raises:
            TransportError: the request did not complete (network error or timeout)
        """
        headers = {
            "Accept": self.ACCEPT,
            "User-Agent": self.user_agent,
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=headers) as response:
                    body = await response.read()
                    logger.debug(f"GET {url} -> HTTP {response.status} ({len(body)} bytes)")
                    return response.status, body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Request to {url} failed: {e!r}") from e
