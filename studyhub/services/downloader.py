"""
Download helper for queued jobs.

``download_to_temp`` streams a source URL into a process-local temporary file
and yields it; the file is deleted when the context exits, whatever happens
inside it.
"""
import asyncio
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import httpx

from ..core.config import DOWNLOAD_MAX_BYTES, DOWNLOAD_TIMEOUT_SECONDS, TMP_DIR
from ..core.exceptions import DownloadTooLargeError, PermanentJobError, RetryableJobError
from ..core.logging_config import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadedFile:
    path: Path
    content_type: Optional[str]
    size_bytes: int


class Downloader:
    """
    Streams files over HTTP with a wall-clock cap and a size cap.

    Args:
        timeout: Hard limit in seconds for the whole download
        max_bytes: Largest accepted body
        tmp_dir: Directory for temporary files (system default if None)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        max_bytes: int = DOWNLOAD_MAX_BYTES,
        tmp_dir: Optional[str] = TMP_DIR,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.tmp_dir = tmp_dir
        self.transport = transport

    async def _stream_into(self, url: str, handle) -> DownloadedFile:
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self.transport
        ) as client:
            async with client.stream("GET", url) as response:
                if response.status_code >= 500 or response.status_code == 429:
                    raise RetryableJobError(f"Source returned HTTP {response.status_code}")
                if response.status_code >= 400:
                    raise PermanentJobError(f"Source returned HTTP {response.status_code}")

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise DownloadTooLargeError(f"Source is {declared} bytes, limit is {self.max_bytes}")

                size = 0
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise DownloadTooLargeError(f"Source exceeds {self.max_bytes} bytes")
                    handle.write(chunk)
                handle.flush()

                return DownloadedFile(
                    path=Path(handle.name),
                    content_type=response.headers.get("content-type"),
                    size_bytes=size,
                )

    @asynccontextmanager
    async def download_to_temp(self, url: str, suffix: str = "") -> AsyncIterator[DownloadedFile]:
        """
        Download ``url`` into a temporary file and yield it.

        Raises:
            RetryableJobError: Timeout, transport error, or 5xx/429 from the source
            PermanentJobError: Other 4xx responses or an oversized body
        """
        handle = tempfile.NamedTemporaryFile(prefix="studyhub-", suffix=suffix, dir=self.tmp_dir, delete=False)
        try:
            try:
                with handle:
                    downloaded = await asyncio.wait_for(self._stream_into(url, handle), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise RetryableJobError(f"Download exceeded {self.timeout}s") from e
            except httpx.TimeoutException as e:
                raise RetryableJobError(f"Download timed out: {e}") from e
            except httpx.TransportError as e:
                raise RetryableJobError(f"Download failed: {e}") from e

            logger.debug(f"Downloaded {downloaded.size_bytes} bytes to {downloaded.path}")
            yield downloaded
        finally:
            try:
                os.unlink(handle.name)
            except FileNotFoundError:
                pass
