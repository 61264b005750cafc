"""
Wires the installer's collaborators together from an ``AppConfig``.
"""

from argeon.api.client import ArgeonAPIClient
from argeon.core.download_engine import DownloadEngine
from argeon.core.events import EventBus
from argeon.core.installer import InstallationOrchestrator
from argeon.launchers import GenericLauncherAdapter, ThirdPartyLauncherAdapter
from argeon.models.config import AppConfig, LauncherKind
from argeon.storage.filesystem import LocalFilesystem
from argeon.transfer import Downloader
from argeon.utils.retry import RetryPolicy


def create_installer(
    config: AppConfig, api_client: ArgeonAPIClient, events: EventBus
) -> InstallationOrchestrator:
    filesystem = LocalFilesystem()
    policy = RetryPolicy(max_attempts=config.max_attempts, base_delay=config.retry_delay)

    engine = DownloadEngine(
        downloader=Downloader(timeout=config.request_timeout),
        url_for=api_client.file_url,
        events=events,
        filesystem=filesystem,
        policy=policy,
        verify_hashes=config.verify_hashes,
    )
    adapters = {
        LauncherKind.GENERIC: GenericLauncherAdapter(
            config,
            fetch_loader_meta=api_client.fetch_fabric_loader_meta,
            filesystem=filesystem,
            policy=policy,
        ),
        LauncherKind.THIRD_PARTY: ThirdPartyLauncherAdapter(config, filesystem=filesystem),
    }
    return InstallationOrchestrator(
        adapters=adapters,
        download_engine=engine,
        events=events,
        filesystem=filesystem,
    )
