"""Remote fetcher downloading source clips over HTTP."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from videonote.modules.conversion.errors import FetchFailedError

logger = logging.getLogger(__name__)


class FileResolver(ABC):
    """Contract for turning an opaque file handle into a download URL."""

    @abstractmethod
    async def resolve_url(self, file_id: str) -> str:
        """Resolve a remote file handle.

        Args:
            file_id: Opaque file handle from the inbound message

        Returns:
            URL the raw bytes can be downloaded from
        """
        pass


class RemoteFetcher:
    """Downloads the full body behind a file handle.

    A single attempt is made; the first failure is final.
    """

    def __init__(
        self,
        resolver: FileResolver,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        self.resolver = resolver
        self.client = client
        self.timeout = timeout

    async def fetch(self, file_id: str) -> bytes:
        """Fetch the raw bytes of a remote file.

        Args:
            file_id: Opaque file handle

        Returns:
            Complete response body

        Raises:
            FetchFailedError: On resolution, transport, status or body errors
        """
        try:
            url = await self.resolver.resolve_url(file_id)
        except Exception as e:
            raise FetchFailedError(f"Could not resolve file {file_id}: {e}") from e

        if self.client is not None:
            return await self._download(self.client, url)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._download(client, url)

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchFailedError(
                f"Download failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchFailedError(f"Download failed: {type(e).__name__}") from e

        data = response.content
        expected = response.headers.get("content-length")
        encoded = "content-encoding" in response.headers
        if not encoded and expected is not None and expected.isdigit() and int(expected) != len(data):
            raise FetchFailedError(
                f"Truncated body: expected {expected} bytes, got {len(data)}"
            )

        logger.debug("Downloaded %d bytes", len(data))
        return data
