"""
Handles the low-level downloading of files over HTTP.

One call is one transfer attempt; retrying is the caller's business.
"""

import asyncio
import logging
import os

import aiofiles
import aiohttp

from argeon.exceptions import DownloadError

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()


async def get_connection_pool(timeout: float = 60.0) -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for downloads.

    This function ensures that only one connection pool is created for the
    lifetime of the application run.
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        connector = aiohttp.TCPConnector(
            limit=4,
            ttl_dns_cache=600,  # 10 minutes
            keepalive_timeout=30,
            enable_cleanup_closed=True,
        )
        client_timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=15, sock_read=timeout or None
        )
        _connection_pool = aiohttp.ClientSession(
            connector=connector,
            timeout=client_timeout,
            headers={"Accept": "application/octet-stream"},
        )
        log.debug("Created download connection pool.")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared global connection pool."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            _connection_pool = None
            log.debug("Shared downloader connection pool closed.")


class Downloader:
    """Streams a URL to a file on disk."""

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(self, timeout: float = 60.0):
        self.timeout = timeout

    async def download_file(self, url: str, destination_path: str) -> int:
        """
        Performs a single transfer of ``url`` into ``destination_path``.

        Returns:
            The number of bytes written.

        Raises:
            DownloadError: On any HTTP, network or local write failure.
        """
        try:
            session = await get_connection_pool(self.timeout)
            async with session.get(url, allow_redirects=True) as response:
                response.raise_for_status()
                bytes_written = 0
                async with aiofiles.open(destination_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_written += len(chunk)
        except aiohttp.ClientResponseError as e:
            raise DownloadError(
                f"Server answered {e.status} for '{os.path.basename(destination_path)}'"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise DownloadError(
                f"Transfer of '{os.path.basename(destination_path)}' failed: "
                f"{e or type(e).__name__}"
            ) from e

        log.debug(f"Fetched {bytes_written} bytes into '{destination_path}'.")
        return bytes_written
