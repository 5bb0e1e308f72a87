"""
Blob download - fetches raw document bytes from a (SAS) blob URL.
"""
from functools import lru_cache
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import BlobDownloadError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class BlobDownloader:
    """Downloads blobs over HTTP(S) with a single attempt."""

    def __init__(
            self,
            timeout: float = 120.0,
            max_size: Optional[int] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout
        self.max_size = max_size
        self.transport = transport

    async def download(self, blob_url: str) -> bytes:
        """
        Download the blob at ``blob_url``.

        Raises:
            BlobDownloadError: on transport failure, non-2xx status or oversized payload
        """
        logger.info(f"Downloading blob from: {blob_url}")

        try:
            async with httpx.AsyncClient(
                    timeout=self.timeout,
                    transport=self.transport,
                    follow_redirects=True
            ) as client:
                response = await client.get(blob_url)
        except httpx.HTTPError as e:
            logger.error(f"Error downloading blob from {blob_url}: {e}", exc_info=True)
            raise BlobDownloadError(f"Failed to download blob: {e}") from e

        if response.is_error:
            logger.error(
                f"Failed to download blob. Status: {response.status_code}, "
                f"Content: {response.text[:500]}"
            )
            raise BlobDownloadError(
                f"Failed to download blob: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code
            )

        data = response.content
        if self.max_size is not None and len(data) > self.max_size:
            raise BlobDownloadError(
                f"Blob too large: {len(data):,} bytes (limit {self.max_size:,})"
            )

        logger.info(f"Successfully downloaded {len(data):,} bytes")
        return data


@lru_cache()
def get_blob_downloader() -> BlobDownloader:
    return BlobDownloader(
        timeout=settings.BLOB_DOWNLOAD_TIMEOUT,
        max_size=settings.MAX_DOWNLOAD_SIZE
    )
