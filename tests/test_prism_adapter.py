import json
from pathlib import Path
from typing import Callable

import pytest

from argeon.core.paths import Environment, InstallTarget, resolve_install_target
from argeon.exceptions import LauncherConfigError
from argeon.launchers.icon import load_icon
from argeon.launchers.prism import (
    ThirdPartyLauncherAdapter,
    build_component_stack,
    render_instance_config,
)
from argeon.models.config import AppConfig, LauncherKind
from argeon.models.manifest import InstanceManifest

Factory = Callable[..., InstanceManifest]


@pytest.fixture
def adapter(config: AppConfig) -> ThirdPartyLauncherAdapter:
    return ThirdPartyLauncherAdapter(config)


def _prepared_target(env: Environment, manifest: InstanceManifest) -> InstallTarget:
    target = resolve_install_target(env, LauncherKind.THIRD_PARTY, manifest.name)
    Path(target.instance_path).mkdir(parents=True)
    return target


def test_render_instance_config() -> None:
    rendered = render_instance_config(
        {"enabled": True, "off": False, "missing": None, "obj": {"a": 1}, "text": "x y"}
    )
    assert rendered == 'enabled=true\noff=false\nmissing=null\nobj={"a":1}\ntext=x y'


def test_vanilla_component_stack_has_only_minecraft(make_manifest: Factory) -> None:
    stack = build_component_stack(make_manifest(loader={"type": "vanilla"}))
    assert stack["formatVersion"] == 1
    assert stack["components"] == [
        {"important": True, "uid": "net.minecraft", "version": "1.20.1"}
    ]


async def test_writes_instance_config(
    adapter: ThirdPartyLauncherAdapter, env: Environment, make_manifest: Factory
) -> None:
    manifest = make_manifest()
    target = _prepared_target(env, manifest)

    await adapter.write_config(manifest, target)

    lines = (Path(target.instance_path) / "instance.cfg").read_text().split("\n")
    assert lines == [
        "ExportAuthor=Communivents",
        "ExportName=Survival Event",
        "InstanceType=OneSix",
        "JavaVersion=17",
        "MaxMemAlloc=4G",
        "name=Survival Event",
        "notes=Weekend survival server",
        "iconKey=communivents",
    ]


async def test_existing_icon_is_kept_and_fabric_stack_has_two_components(
    adapter: ThirdPartyLauncherAdapter, env: Environment, make_manifest: Factory
) -> None:
    manifest = make_manifest()
    target = _prepared_target(env, manifest)
    icon = Path(target.launcher_root) / "icons" / "communivents.png"
    icon.parent.mkdir(parents=True)
    icon.write_bytes(b"user icon")

    await adapter.write_config(manifest, target)

    assert icon.read_bytes() == b"user icon"
    assert [p.name for p in icon.parent.iterdir()] == ["communivents.png"]

    pack = json.loads((Path(target.instance_path) / "mmc-pack.json").read_text())
    assert len(pack["components"]) == 2
    loader = pack["components"][1]
    assert loader["uid"] == "net.fabricmc.fabric-loader"
    assert loader["version"] == "0.15.7"
    assert loader["requires"] == [{"suggests": "17", "uid": "org.prismlauncher.java"}]


async def test_missing_icon_is_installed(
    adapter: ThirdPartyLauncherAdapter, env: Environment, make_manifest: Factory
) -> None:
    manifest = make_manifest()
    target = _prepared_target(env, manifest)

    await adapter.write_config(manifest, target)

    icon = Path(target.launcher_root) / "icons" / "communivents.png"
    assert icon.read_bytes() == load_icon()
    assert icon.read_bytes().startswith(b"\x89PNG")


async def test_write_errors_are_wrapped(
    adapter: ThirdPartyLauncherAdapter, env: Environment, make_manifest: Factory
) -> None:
    manifest = make_manifest()
    target = resolve_install_target(env, LauncherKind.THIRD_PARTY, manifest.name)

    with pytest.raises(LauncherConfigError) as exc_info:
        await adapter.write_config(manifest, target)

    assert isinstance(exc_info.value.__cause__, OSError)
