from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import pytest

from argeon.core.download_engine import DownloadEngine
from argeon.core.events import EventBus, EventRecorder
from argeon.core.installer import InstallationOrchestrator
from argeon.core.paths import Environment, OperatingSystem
from argeon.launchers import GenericLauncherAdapter, ThirdPartyLauncherAdapter
from argeon.models.config import AppConfig, LauncherKind
from argeon.models.manifest import InstanceManifest
from argeon.storage.filesystem import LocalFilesystem
from argeon.utils.retry import RetryPolicy

SERVER = "http://server.test"

Response = Union[bytes, Exception, List[Union[bytes, Exception]]]


class FakeDownloader:
    """Stands in for the HTTP downloader; writes canned bytes or raises."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.responses: Dict[str, Response] = {}
        self.default: bytes = b"payload"

    def calls_for(self, url: str) -> int:
        return self.calls.count(url)

    async def download_file(self, url: str, destination_path: str) -> int:
        self.calls.append(url)
        response = self.responses.get(url, self.default)
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, Exception):
            raise response
        with open(destination_path, "wb") as f:
            f.write(response)
        return len(response)


class FakeLoaderMeta:
    """Async callable returning a Fabric loader profile."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    async def __call__(self, minecraft_version: str, loader_version: str) -> Dict[str, Any]:
        self.calls.append((minecraft_version, loader_version))
        return {
            "loader": {"maven": f"net.fabricmc:fabric-loader:{loader_version}"},
            "intermediary": {"maven": f"net.fabricmc:intermediary:{minecraft_version}"},
            "launcherMeta": {
                "libraries": {
                    "common": [
                        {"name": "org.ow2.asm:asm:9.6", "url": "https://maven.fabricmc.net/"},
                        {"name": "net.fabricmc:sponge-mixin:0.12.5"},
                    ]
                }
            },
        }


def server_url(download_url: str) -> str:
    return SERVER + download_url


@pytest.fixture
def no_sleep(mocker: Any) -> Any:
    """Records backoff delays instead of waiting them out."""
    return mocker.patch("argeon.utils.retry.asyncio.sleep", new_callable=mocker.AsyncMock)


@pytest.fixture
def env(tmp_path: Path) -> Environment:
    home = tmp_path / "home"
    home.mkdir()
    return Environment(os=OperatingSystem.LINUX, home=str(home))


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(events: EventBus) -> EventRecorder:
    return EventRecorder(events)


@pytest.fixture
def downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture
def loader_meta() -> FakeLoaderMeta:
    return FakeLoaderMeta()


@pytest.fixture
def engine(downloader: FakeDownloader, events: EventBus) -> DownloadEngine:
    return DownloadEngine(
        downloader=downloader,
        url_for=server_url,
        events=events,
        policy=RetryPolicy(max_attempts=3, base_delay=1.0),
    )


@pytest.fixture
def installer(
    config: AppConfig,
    env: Environment,
    engine: DownloadEngine,
    events: EventBus,
    loader_meta: FakeLoaderMeta,
) -> InstallationOrchestrator:
    filesystem = LocalFilesystem()
    adapters = {
        LauncherKind.GENERIC: GenericLauncherAdapter(
            config, fetch_loader_meta=loader_meta, filesystem=filesystem
        ),
        LauncherKind.THIRD_PARTY: ThirdPartyLauncherAdapter(config, filesystem=filesystem),
    }
    return InstallationOrchestrator(
        adapters=adapters,
        download_engine=engine,
        events=events,
        filesystem=filesystem,
        environment=lambda: env,
    )


@pytest.fixture
def make_manifest() -> Callable[..., InstanceManifest]:
    """Builds a manifest from the backend's JSON shape with optional overrides."""

    def _make(**overrides: Any) -> InstanceManifest:
        data: Dict[str, Any] = {
            "name": "Survival Event",
            "description": "Weekend survival server",
            "minecraft_version": "1.20.1",
            "loader": {"type": "fabric", "version": "0.15.7"},
            "java": {"minimum_version": "17", "recommended_memory": "4G"},
            "download_urls": {"client_jar": "", "assets": ""},
            "files": {
                "mods": [
                    {
                        "filename": "sodium.jar",
                        "download_url": "/files/survival/mods/sodium.jar",
                    },
                ],
            },
        }
        data.update(overrides)
        return InstanceManifest.model_validate(data)

    return _make


def snapshot_tree(root: Path) -> Dict[str, bytes]:
    """Relative path -> content for every file below ``root`` (directories map to b'')."""
    tree: Dict[str, bytes] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        tree[rel] = path.read_bytes() if path.is_file() else b""
    return tree
