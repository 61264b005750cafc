"""
The main orchestrator: turns an instance manifest into an installed instance.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Optional

from rich.markup import escape

from argeon.core.download_engine import DownloadEngine
from argeon.core.events import EventBus
from argeon.core.locks import InstanceLockRegistry
from argeon.core.paths import Environment, InstallTarget, resolve_install_target
from argeon.exceptions import ConfigurationError
from argeon.models.config import LauncherKind
from argeon.models.events import (
    DownloadFailuresEvent,
    InstallCompleteEvent,
    InstallErrorEvent,
)
from argeon.models.manifest import InstanceManifest
from argeon.models.stats import InstallResult, InstallStats, InstallStatus
from argeon.storage.filesystem import LocalFilesystem
from argeon.utils.formatting import summarize_failures

log = logging.getLogger(__name__)

CLIENT_JAR_NAME = "client.jar"


class InstallState(str, Enum):
    IDLE = "idle"
    RESOLVING_PATHS = "resolving_paths"
    CHECKING_EXISTING = "checking_existing"
    CONFLICT_PENDING_CONFIRMATION = "conflict_pending_confirmation"
    PREPARING_DIRECTORIES = "preparing_directories"
    WRITING_LAUNCHER_CONFIG = "writing_launcher_config"
    DOWNLOADING_FILES = "downloading_files"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class InstallRun:
    """Mutable state of a single ``install`` call."""

    manifest: InstanceManifest
    launcher: LauncherKind
    force: bool
    state: InstallState = InstallState.IDLE
    history: list[InstallState] = field(default_factory=list)
    target: Optional[InstallTarget] = None
    stats: InstallStats = field(default_factory=InstallStats)
    failed_files: list[str] = field(default_factory=list)

    def transition(self, state: InstallState) -> None:
        log.debug(f"[{self.manifest.name}] {self.state.value} -> {state.value}")
        self.history.append(state)
        self.state = state


class InstallationOrchestrator:
    """
    Installs one instance for one launcher.

    Steps run strictly one after another: resolve paths, check for an existing
    instance, prepare directories, write launcher config, download files.
    Anything failing before the download step is fatal; individual download
    failures are only reported.
    """

    def __init__(
        self,
        adapters: Mapping[LauncherKind, object],
        download_engine: DownloadEngine,
        events: EventBus,
        filesystem: Optional[LocalFilesystem] = None,
        environment: Callable[[], Environment] = Environment.from_host,
        locks: Optional[InstanceLockRegistry] = None,
    ):
        """
        Args:
            adapters: One config adapter per launcher kind, each exposing
                ``async write_config(manifest, target)``.
            download_engine: Downloads manifest entries.
            events: Channel for progress, completion and error events.
            filesystem: Filesystem capability.
            environment: Called once per install to snapshot the host environment.
            locks: Registry preventing concurrent installs of one instance.
        """
        self.adapters = dict(adapters)
        self.download_engine = download_engine
        self.events = events
        self.filesystem = filesystem or LocalFilesystem()
        self.environment = environment
        self.locks = locks or InstanceLockRegistry()
        self.last_run: Optional[InstallRun] = None

    def resolve_target(
        self, manifest: InstanceManifest, launcher: LauncherKind
    ) -> InstallTarget:
        return resolve_install_target(self.environment(), launcher, manifest.name)

    async def install(
        self, manifest: InstanceManifest, launcher: LauncherKind, force: bool = False
    ) -> InstallResult:
        """
        Installs ``manifest`` for ``launcher``.

        Args:
            manifest: The instance to install.
            launcher: Which launcher the instance is installed for.
            force: Delete an existing instance directory instead of stopping.
                Destroys that directory irreversibly.

        Returns:
            A truthy result when created; a falsy ``NEEDS_CONFIRMATION``
            result, with nothing written, when the instance already exists and
            ``force`` is false.

        Raises:
            InstallInProgressError: If the same instance is being installed.
            ArgeonError: Any fatal error (after publishing an error event).
        """
        async with self.locks.hold(manifest.name):
            run = InstallRun(manifest=manifest, launcher=launcher, force=force)
            self.last_run = run
            try:
                return await self._run(run)
            except Exception as e:
                run.transition(InstallState.FAILED)
                self.events.publish(InstallErrorEvent(error=str(e) or type(e).__name__))
                log.error(f"[red]✗ Installing '{escape(manifest.name)}' failed: {e}[/red]")
                raise

    async def _run(self, run: InstallRun) -> InstallResult:
        manifest = run.manifest

        run.transition(InstallState.RESOLVING_PATHS)
        target = self.resolve_target(manifest, run.launcher)
        run.target = target
        log.debug(f"Instance path: {target.instance_path}")

        run.transition(InstallState.CHECKING_EXISTING)
        if await self.filesystem.exists(target.instance_path):
            if not run.force:
                run.transition(InstallState.CONFLICT_PENDING_CONFIRMATION)
                log.warning(
                    f"[yellow]Instance '{escape(manifest.name)}' already exists.[/yellow]"
                )
                return InstallResult(
                    status=InstallStatus.NEEDS_CONFIRMATION,
                    instance_name=manifest.name,
                    instance_path=target.instance_path,
                    stats=run.stats,
                )
            log.info(f"Removing existing instance at [dim]{target.instance_path}[/dim]")
            await self.filesystem.remove_tree(target.instance_path)

        run.transition(InstallState.PREPARING_DIRECTORIES)
        await self.filesystem.mkdir(target.instance_path)
        await self.filesystem.mkdir(target.game_data_path)

        run.transition(InstallState.WRITING_LAUNCHER_CONFIG)
        adapter = self.adapters.get(run.launcher)
        if adapter is None:
            raise ConfigurationError(f"No adapter registered for launcher '{run.launcher.value}'.")
        await adapter.write_config(manifest, target)

        run.transition(InstallState.DOWNLOADING_FILES)
        await self._download_files(run)

        if run.failed_files:
            message = summarize_failures(run.failed_files)
            log.warning(f"[yellow]⚠ {escape(message)}[/yellow]")
            log.debug(f"Failed downloads: {run.failed_files}")
            self.events.publish(
                DownloadFailuresEvent(
                    instanceName=manifest.name,
                    message=message,
                    failed=list(run.failed_files),
                )
            )

        run.transition(InstallState.COMPLETED)
        self.events.publish(
            InstallCompleteEvent(instanceName=manifest.name, path=str(target.instance_path))
        )
        log.info(f"[green]✓ Created \"{escape(manifest.name)}\" instance![/green]")
        return InstallResult(
            status=InstallStatus.CREATED,
            instance_name=manifest.name,
            instance_path=target.instance_path,
            failed_files=list(run.failed_files),
            stats=run.stats,
        )

    async def _download_files(self, run: InstallRun) -> None:
        """Downloads every category, then the client jar for vanilla instances."""
        manifest, target = run.manifest, run.target
        total_files = manifest.total_files
        processed = 0

        for category, entries in manifest.iter_categories():
            category_dir = target.game_data_path / category.value
            downloadable = [e for e in entries if not e.is_index]
            try:
                await self.filesystem.mkdir(category_dir)
            except OSError as e:
                log.error(f"[red]Could not create '{category_dir}': {e}[/red]")
                run.failed_files.extend(entry.filename for entry in downloadable)
                run.stats.files_failed += len(downloadable)
                processed += len(downloadable)
                continue

            failed = await self.download_engine.download_batch(
                entries, category_dir, processed, total_files, stats=run.stats
            )
            run.failed_files.extend(
                entry.filename for entry in downloadable if entry.filename in failed
            )
            processed += len(downloadable)

        if manifest.is_vanilla and manifest.download_urls.client_jar:
            log.info("Downloading Minecraft client...")
            if not await self.download_engine.download_single(
                manifest.download_urls.client_jar,
                target.game_data_path / CLIENT_JAR_NAME,
                CLIENT_JAR_NAME,
                stats=run.stats,
            ):
                run.failed_files.append(CLIENT_JAR_NAME)
