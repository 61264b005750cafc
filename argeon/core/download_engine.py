"""
Downloads an ordered batch of manifest entries into one directory.
"""

import asyncio
import logging
from pathlib import Path, PurePath
from typing import Callable, Optional, Sequence

from pathvalidate import ValidationError as PathValidationError
from pathvalidate import validate_filepath
from rich.markup import escape

from argeon.core.events import EventBus
from argeon.exceptions import DownloadError
from argeon.models.events import ProgressEvent
from argeon.models.manifest import FileEntry
from argeon.models.stats import InstallStats
from argeon.storage.filesystem import LocalFilesystem
from argeon.transfer import Downloader, FileIntegrityChecker
from argeon.utils.formatting import percentage
from argeon.utils.retry import RetriesExhaustedError, RetryPolicy, attempt_with_policy

log = logging.getLogger(__name__)


class DownloadEngine:
    """
    Fetches files one after another, retrying each one under a ``RetryPolicy``.

    A file that fails every attempt is recorded and skipped; a batch never
    aborts because of a single file.
    """

    def __init__(
        self,
        downloader: Downloader,
        url_for: Callable[[str], str],
        events: EventBus,
        filesystem: Optional[LocalFilesystem] = None,
        policy: Optional[RetryPolicy] = None,
        verify_hashes: bool = False,
    ):
        """
        Args:
            downloader: Performs a single transfer attempt.
            url_for: Turns a manifest ``download_url`` into an absolute URL.
            events: Where progress events are published.
            filesystem: Filesystem capability used to create directories.
            policy: Retry policy applied to each file.
            verify_hashes: Also compare each file against its manifest hash.
        """
        self.downloader = downloader
        self.url_for = url_for
        self.events = events
        self.filesystem = filesystem or LocalFilesystem()
        self.policy = policy or RetryPolicy()
        self.verify_hashes = verify_hashes

    async def download_batch(
        self,
        files: Sequence[FileEntry],
        target_dir: PurePath,
        start_index: int,
        total_count: int,
        stats: Optional[InstallStats] = None,
    ) -> set[str]:
        """
        Downloads ``files`` in order into ``target_dir``.

        Args:
            files: Entries of one category, in manifest order.
            target_dir: Directory the entries' filenames are relative to.
            start_index: Downloadable files already processed in this install run.
            total_count: Downloadable files in the whole install run.
            stats: Optional statistics to update.

        Returns:
            Filenames that failed every attempt.
        """
        failed: set[str] = set()
        index = start_index

        for entry in files:
            if entry.is_index:
                if stats:
                    stats.index_entries_skipped += 1
                continue

            destination = Path(target_dir) / entry.filename
            index += 1
            self.events.publish(
                ProgressEvent(
                    filename=entry.filename,
                    current=index,
                    total=total_count,
                    percentage=percentage(index, total_count),
                )
            )

            try:
                validate_filepath(entry.filename, platform="auto")
            except PathValidationError as e:
                if stats:
                    stats.record_failure()
                log.error(
                    f"  [red]✗ Failed:[/] {escape(entry.filename)}"
                    f" (not a valid path on this system: {escape(str(e))})"
                )
                failed.add(entry.filename)
                continue

            log.debug(f"Downloading: {entry.filename}")
            if not await self.download_single(
                self.url_for(entry.download_url),
                destination,
                entry.filename,
                expected_hash=entry.hash,
                stats=stats,
            ):
                failed.add(entry.filename)

        return failed

    async def download_single(
        self,
        url: str,
        destination: PurePath,
        label: str,
        expected_hash: str = "",
        stats: Optional[InstallStats] = None,
    ) -> bool:
        """
        Fetches one URL into ``destination`` under the retry policy.

        Returns:
            True if some attempt succeeded, False once every attempt failed.
        """
        destination = Path(destination)
        try:
            size = await attempt_with_policy(
                lambda: self._attempt(url, destination, label, expected_hash, stats),
                self.policy,
                description=label,
                retry_on=(DownloadError, OSError),
            )
        except RetriesExhaustedError as e:
            if stats:
                stats.record_failure()
            log.error(f"  [red]✗ Failed:[/] {escape(label)} ({e.last_error})")
            return False

        if stats:
            stats.record_success(size)
        return True

    async def _attempt(
        self,
        url: str,
        destination: Path,
        label: str,
        expected_hash: str,
        stats: Optional[InstallStats],
    ) -> int:
        """One transfer, accepted only if a non-empty regular file landed on disk."""
        if stats:
            stats.attempts_made += 1
        await self.filesystem.mkdir(destination.parent)
        await self.downloader.download_file(url, str(destination))

        if not await asyncio.to_thread(
            FileIntegrityChecker.check_download, str(destination)
        ):
            raise DownloadError(f"Downloaded file is empty or missing: {label}")

        if self.verify_hashes and expected_hash:
            if not await asyncio.to_thread(
                FileIntegrityChecker.check_hash, str(destination), expected_hash
            ):
                raise DownloadError(f"Hash mismatch for {label}")

        return await self.filesystem.size(destination)
