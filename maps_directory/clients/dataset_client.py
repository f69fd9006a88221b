"""
Singleton dataset client with rate limiting using aiolimiter.
"""
import asyncio
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from aiohttp import ClientError, ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from loguru import logger

from maps_directory.config import CONCURRENCY, REQUEST_TIMEOUT
from maps_directory.errors import TransportFailure


def is_http_locator(locator: str) -> bool:
    return urlparse(locator).scheme in ("http", "https")


def _local_path(locator: str) -> Path:
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    return Path(locator)


class DatasetClient:
    """
    Singleton client that fetches raw dataset bytes.
    HTTP(S) locators go through one shared aiohttp session; anything else is read from disk.
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not DatasetClient._initialized:
            # Token bucket: CONCURRENCY requests per second
            self.rate_limiter = AsyncLimiter(max_rate=CONCURRENCY, time_period=1.0)
            self.timeout = REQUEST_TIMEOUT
            self._session: Optional[ClientSession] = None
            DatasetClient._initialized = True

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout or None))
        return self._session

    async def fetch(self, locator: str) -> bytes:
        """
        Fetch the raw bytes of a dataset.

        Args:
            locator: http(s) URL, file:// URL or filesystem path.

        Returns:
            The undecoded response body or file contents.

        Raises:
            TransportFailure: On a non-success HTTP status, a connection problem or an unreadable file.
        """
        if is_http_locator(locator):
            return await self._get(locator)
        return await self._read_file(locator)

    async def _get(self, url: str) -> bytes:
        async with self.rate_limiter:
            session = await self._get_session()
            start = time.perf_counter()
            logger.debug(f"▶️ GET {url}")
            try:
                async with session.get(url) as resp:
                    if not 200 <= resp.status < 300:
                        logger.debug(f"⚠️ GET {url} returned status {resp.status}")
                        raise TransportFailure(url, status=resp.status)
                    body = await resp.read()
            except (ClientError, asyncio.TimeoutError) as e:
                logger.debug(f"⚠️ GET {url} failed: {e!r}")
                raise TransportFailure(url, cause=e) from e

            duration = time.perf_counter() - start
            logger.debug(f"✅ GET {url} done in {duration:.2f}s ({len(body)} bytes)")
            return body

    async def _read_file(self, locator: str) -> bytes:
        path = _local_path(locator)
        logger.debug(f"📄 Reading {path}")
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.debug(f"⚠️ Could not read {path}: {e}")
            raise TransportFailure(locator, cause=e) from e

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
