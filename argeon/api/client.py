"""
Async client for the Communivents instance backend and the Fabric metadata service.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from argeon.exceptions import ManifestError
from argeon.models.config import DEFAULT_FABRIC_META_URL
from argeon.models.manifest import InstanceListResponse, InstanceManifest

log = logging.getLogger(__name__)

# Characters left untouched when encoding a file path, matching a browser's encodeURI.
URI_SAFE_CHARS = "/:;,?&=+$#@!*'()~-_."


class ArgeonAPIClient:
    """
    Async client for the JSON endpoints the installer depends on.

    Features:
    - Validated instance list (``GET /api/instances``)
    - URL building for manifest file entries
    - Fabric loader metadata lookups
    """

    def __init__(
        self,
        api_base: str,
        fabric_meta_url: str = DEFAULT_FABRIC_META_URL,
        timeout: float = 60.0,
    ):
        """
        Initializes the API client.

        Args:
            api_base: Root URL of the instance backend, without trailing slash.
            fabric_meta_url: Root of the Fabric loader metadata endpoint.
            timeout: Total timeout for a single JSON request, in seconds.
        """
        self.api_base = api_base.rstrip("/")
        self.fabric_meta_url = fabric_meta_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Content-Type": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "ArgeonAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def file_url(self, download_url: str) -> str:
        """Absolute, URI-encoded URL for a manifest entry's ``download_url``."""
        return self.api_base + quote(download_url, safe=URI_SAFE_CHARS)

    async def fetch_json(self, url: str) -> Any:
        """
        GETs a URL and parses the body as JSON.

        Raises:
            aiohttp.ClientError: On transport or HTTP errors.
            asyncio.TimeoutError: When the request times out.
        """
        await self._initialize_session()
        async with self._session.get(url) as r:
            r.raise_for_status()
            # Some backends answer JSON with a text/plain content type.
            return await r.json(content_type=None)

    async def fetch_instances(self) -> List[InstanceManifest]:
        """Fetches and validates the list of installable instances."""
        url = f"{self.api_base}/api/instances"
        log.info(f"Fetching instances from: [dim]{url}[/dim]")
        try:
            payload = await self.fetch_json(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ManifestError(f"Could not fetch the instance list: {e}") from e

        try:
            response = InstanceListResponse.model_validate(payload)
        except ValidationError as e:
            raise ManifestError(f"The instance list is malformed:\n{e}") from e

        log.debug(f"Fetched {len(response.instances)} instance(s).")
        return response.instances

    async def find_instance(self, name: str) -> InstanceManifest:
        """Looks up one instance by name (case-insensitive)."""
        instances = await self.fetch_instances()
        for instance in instances:
            if instance.name.lower() == name.strip().lower():
                return instance
        available = ", ".join(i.name for i in instances) or "none"
        raise ManifestError(f"No instance named '{name}'. Available: {available}")

    async def fetch_fabric_loader_meta(
        self, minecraft_version: str, loader_version: str
    ) -> Dict[str, Any]:
        """Fabric loader profile for a game/loader version pair."""
        return await self.fetch_json(
            f"{self.fabric_meta_url}/{quote(minecraft_version)}/{quote(loader_version)}"
        )
