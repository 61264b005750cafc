"""
Per-instance exclusion so two installs of the same instance never interleave.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from argeon.exceptions import InstallInProgressError
from argeon.utils.formatting import slugify

log = logging.getLogger(__name__)


class InstanceLockRegistry:
    """
    Tracks which instance slugs are currently being installed.

    A second request for a held slug is rejected rather than queued: the
    caller asked to install something that is already being installed.
    """

    def __init__(self):
        self._held: set[str] = set()
        self._lock = asyncio.Lock()

    def is_held(self, instance_name: str) -> bool:
        return slugify(instance_name) in self._held

    @asynccontextmanager
    async def hold(self, instance_name: str) -> AsyncIterator[str]:
        slug = slugify(instance_name)
        async with self._lock:
            if slug in self._held:
                raise InstallInProgressError(
                    f"Instance '{instance_name}' is already being installed."
                )
            self._held.add(slug)
        log.debug(f"Acquired install lock for '{slug}'.")
        try:
            yield slug
        finally:
            async with self._lock:
                self._held.discard(slug)
            log.debug(f"Released install lock for '{slug}'.")
