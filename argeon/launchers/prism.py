"""
Writes an instance in PrismLauncher's per-instance layout.
"""

import json
import logging
from typing import Any, Dict, Optional

from argeon.core.paths import InstallTarget
from argeon.exceptions import LauncherConfigError
from argeon.launchers.icon import load_icon
from argeon.models.config import AppConfig
from argeon.models.manifest import InstanceManifest, LoaderType
from argeon.storage.filesystem import LocalFilesystem

log = logging.getLogger(__name__)

INSTANCE_CONFIG_FILE = "instance.cfg"
COMPONENT_STACK_FILE = "mmc-pack.json"

LOADER_COMPONENTS = {
    LoaderType.FABRIC: "net.fabricmc.fabric-loader",
}


def render_instance_config(config: Dict[str, Any]) -> str:
    """
    Renders ``KEY=VALUE`` lines, one per key.

    Objects and lists are inlined as compact JSON.
    """
    lines = []
    for key, value in config.items():
        if isinstance(value, (dict, list)) or value is None:
            value = json.dumps(value, separators=(",", ":"))
        elif isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{key}={value}")
    return "\n".join(lines)


def build_component_stack(manifest: InstanceManifest) -> Dict[str, Any]:
    components: list[Dict[str, Any]] = [
        {
            "important": True,
            "uid": "net.minecraft",
            "version": manifest.minecraft_version,
        }
    ]
    if loader_uid := LOADER_COMPONENTS.get(manifest.loader.type):
        components.append(
            {
                "uid": loader_uid,
                "version": manifest.loader.version,
                "requires": [
                    {
                        "suggests": manifest.java.minimum_version,
                        "uid": "org.prismlauncher.java",
                    }
                ],
            }
        )
    return {"formatVersion": 1, "components": components}


class ThirdPartyLauncherAdapter:
    """Creates ``instance.cfg``, ``mmc-pack.json`` and the shared launcher icon."""

    def __init__(self, config: AppConfig, filesystem: Optional[LocalFilesystem] = None):
        self.config = config
        self.filesystem = filesystem or LocalFilesystem()

    def build_instance_config(self, manifest: InstanceManifest) -> Dict[str, Any]:
        return {
            "ExportAuthor": self.config.export_author,
            "ExportName": manifest.name,
            "InstanceType": "OneSix",
            "JavaVersion": manifest.java.minimum_version,
            "MaxMemAlloc": manifest.java.recommended_memory,
            "name": manifest.name,
            "notes": manifest.description,
            "iconKey": self.config.icon_key,
        }

    async def write_config(self, manifest: InstanceManifest, target: InstallTarget) -> None:
        """
        Raises:
            LauncherConfigError: If any of the files could not be written.
        """
        try:
            await self.filesystem.write_text(
                target.instance_path / INSTANCE_CONFIG_FILE,
                render_instance_config(self.build_instance_config(manifest)),
            )
            await self.filesystem.write_text(
                target.instance_path / COMPONENT_STACK_FILE,
                json.dumps(build_component_stack(manifest)),
            )
            await self._install_icon(target)
        except Exception as e:
            log.error(f"[red]Failed to write PrismLauncher instance files: {e}[/red]")
            raise LauncherConfigError(
                f"Failed to write PrismLauncher instance files: {e}"
            ) from e

    async def _install_icon(self, target: InstallTarget) -> None:
        icons_dir = target.launcher_root / "icons"
        icon_path = icons_dir / f"{self.config.icon_key}.png"
        if await self.filesystem.exists(icon_path):
            log.debug(f"Icon '{icon_path}' already present.")
            return
        await self.filesystem.mkdir(icons_dir)
        await self.filesystem.write_bytes(icon_path, load_icon())
        log.debug(f"Installed launcher icon at '{icon_path}'.")
