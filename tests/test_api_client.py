from typing import Any, Callable

import aiohttp
import pytest

from argeon.api.client import ArgeonAPIClient
from argeon.exceptions import ManifestError
from argeon.models.manifest import InstanceManifest

Factory = Callable[..., InstanceManifest]


@pytest.fixture
def client() -> ArgeonAPIClient:
    return ArgeonAPIClient("http://141.94.37.234:7122/")


def _payload(make_manifest: Factory, *names: str) -> dict:
    return {
        "status": "success",
        "instances": [make_manifest(name=n).model_dump(mode="json") for n in names],
    }


def test_file_url_encodes_like_a_browser(client: ArgeonAPIClient) -> None:
    assert (
        client.file_url("/files/Survival Event/mods/sodium [1.20].jar")
        == "http://141.94.37.234:7122/files/Survival%20Event/mods/sodium%20%5B1.20%5D.jar"
    )
    assert client.file_url("/files/a/b(c)+d.jar") == "http://141.94.37.234:7122/files/a/b(c)+d.jar"


def test_file_url_encodes_literal_percent(client: ArgeonAPIClient) -> None:
    assert (
        client.file_url("/files/a/100%.png")
        == "http://141.94.37.234:7122/files/a/100%25.png"
    )


async def test_fetch_instances_hits_list_endpoint(
    client: ArgeonAPIClient, make_manifest: Factory, mocker: Any
) -> None:
    fetch = mocker.patch.object(
        client, "fetch_json", mocker.AsyncMock(return_value=_payload(make_manifest, "A", "B"))
    )

    instances = await client.fetch_instances()

    fetch.assert_awaited_once_with("http://141.94.37.234:7122/api/instances")
    assert [i.name for i in instances] == ["A", "B"]


async def test_find_instance_is_case_insensitive(
    client: ArgeonAPIClient, make_manifest: Factory, mocker: Any
) -> None:
    mocker.patch.object(
        client,
        "fetch_json",
        mocker.AsyncMock(return_value=_payload(make_manifest, "Survival Event", "Creative")),
    )
    assert (await client.find_instance(" survival event ")).name == "Survival Event"


async def test_unknown_instance_lists_available(
    client: ArgeonAPIClient, make_manifest: Factory, mocker: Any
) -> None:
    mocker.patch.object(
        client, "fetch_json", mocker.AsyncMock(return_value=_payload(make_manifest, "Creative"))
    )
    with pytest.raises(ManifestError, match="Available: Creative"):
        await client.find_instance("Hardcore")


async def test_network_errors_become_manifest_errors(
    client: ArgeonAPIClient, mocker: Any
) -> None:
    mocker.patch.object(
        client,
        "fetch_json",
        mocker.AsyncMock(side_effect=aiohttp.ClientConnectionError("refused")),
    )
    with pytest.raises(ManifestError) as exc_info:
        await client.fetch_instances()
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)


async def test_malformed_payload_is_rejected(client: ArgeonAPIClient, mocker: Any) -> None:
    mocker.patch.object(
        client,
        "fetch_json",
        mocker.AsyncMock(return_value={"instances": [{"name": "No version"}]}),
    )
    with pytest.raises(ManifestError, match="malformed"):
        await client.fetch_instances()


async def test_fabric_meta_url(client: ArgeonAPIClient, mocker: Any) -> None:
    fetch = mocker.patch.object(client, "fetch_json", mocker.AsyncMock(return_value={}))
    await client.fetch_fabric_loader_meta("1.20.1", "0.15.7")
    fetch.assert_awaited_once_with("https://meta.fabricmc.net/v2/versions/loader/1.20.1/0.15.7")
