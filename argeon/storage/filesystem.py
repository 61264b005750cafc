"""
Async filesystem capability used by the installer and launcher adapters.

All blocking calls go through aiofiles or ``asyncio.to_thread`` so an install
never stalls the event loop while it touches the disk.
"""

import asyncio
import logging
import os
import shutil
import uuid
from pathlib import Path, PurePath

import aiofiles
import aiofiles.os

log = logging.getLogger(__name__)


class LocalFilesystem:
    """Reads and writes the local disk."""

    async def exists(self, path: PurePath) -> bool:
        return await aiofiles.os.path.exists(Path(path))

    async def is_file(self, path: PurePath) -> bool:
        return await aiofiles.os.path.isfile(Path(path))

    async def is_dir(self, path: PurePath) -> bool:
        return await aiofiles.os.path.isdir(Path(path))

    async def size(self, path: PurePath) -> int:
        """Size in bytes, or 0 if the path is missing or not a regular file."""
        try:
            stat_result = await aiofiles.os.stat(Path(path))
        except FileNotFoundError:
            return 0
        return stat_result.st_size if await self.is_file(path) else 0

    async def mkdir(self, path: PurePath) -> None:
        """Creates a directory and its parents; an existing directory is fine."""
        await aiofiles.os.makedirs(Path(path), exist_ok=True)

    async def remove_tree(self, path: PurePath) -> None:
        target = Path(path)
        if await aiofiles.os.path.isdir(target):
            await asyncio.to_thread(shutil.rmtree, target)
        elif await aiofiles.os.path.exists(target):
            await aiofiles.os.remove(target)
        log.debug(f"Removed '{target}'.")

    async def read_text(self, path: PurePath) -> str:
        async with aiofiles.open(Path(path), "r", encoding="utf-8") as f:
            return await f.read()

    async def read_bytes(self, path: PurePath) -> bytes:
        async with aiofiles.open(Path(path), "rb") as f:
            return await f.read()

    async def write_text(self, path: PurePath, content: str) -> None:
        await self._write_atomic(Path(path), content.encode("utf-8"))

    async def write_bytes(self, path: PurePath, content: bytes) -> None:
        await self._write_atomic(Path(path), content)

    async def _write_atomic(self, target: Path, content: bytes) -> None:
        """Writes to a sibling temp file, then swaps it into place."""
        temp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            await asyncio.to_thread(os.replace, temp_path, target)
        finally:
            if await aiofiles.os.path.exists(temp_path):
                try:
                    await aiofiles.os.remove(temp_path)
                except OSError:
                    pass
