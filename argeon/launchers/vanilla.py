"""
Writes an instance into the official Minecraft launcher's profile store.

The store is shared with every other profile the user has, so it is always
read, merged and written back, never replaced.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from argeon.core.paths import InstallTarget
from argeon.exceptions import LauncherConfigError
from argeon.launchers.icon import icon_data_url
from argeon.models.config import AppConfig
from argeon.models.manifest import InstanceManifest, LoaderType
from argeon.storage.filesystem import LocalFilesystem
from argeon.utils.formatting import slugify
from argeon.utils.retry import RetryPolicy, attempt_with_policy

log = logging.getLogger(__name__)

PROFILES_FILE = "launcher_profiles.json"
PROFILE_STORE_VERSION = 3

VANILLA_MAIN_CLASS = "net.minecraft.client.main.Main"
FABRIC_MAIN_CLASS = "net.fabricmc.loader.impl.launch.knot.KnotClient"

LoaderMetaFetcher = Callable[[str, str], Awaitable[Dict[str, Any]]]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def empty_profile_store() -> Dict[str, Any]:
    return {"profiles": {}, "settings": {}, "version": PROFILE_STORE_VERSION}


class GenericLauncherAdapter:
    """Upserts a launcher profile and, once, a version manifest for an instance."""

    def __init__(
        self,
        config: AppConfig,
        fetch_loader_meta: LoaderMetaFetcher,
        filesystem: Optional[LocalFilesystem] = None,
        policy: Optional[RetryPolicy] = None,
    ):
        """
        Args:
            config: Application settings (profile prefix, maven URL).
            fetch_loader_meta: Returns Fabric's loader profile for
                ``(minecraft_version, loader_version)``.
            filesystem: Filesystem capability.
            policy: Retry policy for the metadata lookup.
        """
        self.config = config
        self.fetch_loader_meta = fetch_loader_meta
        self.filesystem = filesystem or LocalFilesystem()
        self.policy = policy or RetryPolicy()

    def profile_id(self, instance_name: str) -> str:
        return f"{self.config.profile_prefix}{slugify(instance_name)}"

    async def write_config(self, manifest: InstanceManifest, target: InstallTarget) -> None:
        """
        Raises:
            LauncherConfigError: If the store or version files could not be
                read, parsed or written.
        """
        try:
            await self._upsert_profile(manifest, target)
            await self._write_version_manifest(manifest, target)
        except LauncherConfigError:
            raise
        except Exception as e:
            log.error(f"[red]Failed to update launcher profiles: {e}[/red]")
            raise LauncherConfigError(
                f"Failed to update Minecraft launcher profiles: {e}"
            ) from e

    async def _read_profile_store(self, profiles_path) -> Dict[str, Any]:
        if not await self.filesystem.exists(profiles_path):
            return empty_profile_store()

        store = json.loads(await self.filesystem.read_text(profiles_path))
        if not isinstance(store, dict):
            raise LauncherConfigError(
                f"'{profiles_path}' does not contain a JSON object; refusing to overwrite it."
            )
        if not isinstance(store.setdefault("profiles", {}), dict):
            raise LauncherConfigError(
                f"'{profiles_path}' has a malformed 'profiles' entry; refusing to overwrite it."
            )
        return store

    async def _upsert_profile(
        self, manifest: InstanceManifest, target: InstallTarget
    ) -> None:
        profiles_path = target.game_data_root / PROFILES_FILE
        store = await self._read_profile_store(profiles_path)

        profile_id = self.profile_id(manifest.name)
        previous = store["profiles"].get(profile_id) or {}
        now = _timestamp()

        profile: Dict[str, Any] = {
            "created": previous.get("created", now),
            "icon": icon_data_url(),
            "lastUsed": now,
            "lastVersionId": manifest.name,
            "name": manifest.name,
            "gameDir": str(target.game_data_path),
            "type": "custom",
        }
        if manifest.java.recommended_memory:
            profile["javaArgs"] = f"-Xmx{manifest.java.recommended_memory}"

        store["profiles"][profile_id] = profile

        await self.filesystem.mkdir(target.game_data_root)
        await self.filesystem.write_text(profiles_path, json.dumps(store, indent=2))
        log.info(f"Updated launcher profile [cyan]{profile_id}[/cyan].")

    async def _write_version_manifest(
        self, manifest: InstanceManifest, target: InstallTarget
    ) -> None:
        """Creates ``versions/<name>/<name>.json`` unless that directory already exists."""
        version_dir = target.game_data_root / "versions" / manifest.name
        if await self.filesystem.exists(version_dir):
            log.debug(f"Version directory '{version_dir}' exists, leaving it untouched.")
            return

        version_json = await self.build_version_manifest(manifest, target)
        await self.filesystem.mkdir(version_dir)
        await self.filesystem.write_text(
            version_dir / f"{manifest.name}.json", json.dumps(version_json)
        )
        log.debug(f"Wrote version manifest for '{manifest.name}'.")

    async def build_version_manifest(
        self, manifest: InstanceManifest, target: InstallTarget
    ) -> Dict[str, Any]:
        is_fabric = manifest.loader.type == LoaderType.FABRIC
        libraries = await self._fabric_libraries(manifest) if is_fabric else []

        return {
            "id": manifest.name,
            "inheritsFrom": manifest.minecraft_version,
            "type": "release",
            "mainClass": FABRIC_MAIN_CLASS if is_fabric else VANILLA_MAIN_CLASS,
            "arguments": {
                "game": ["--gameDir", str(target.game_data_path)],
                "jvm": [f"-DFabricMcEmu={VANILLA_MAIN_CLASS}"] if is_fabric else [],
            },
            "libraries": libraries,
        }

    async def _fabric_libraries(self, manifest: InstanceManifest) -> list[Dict[str, str]]:
        meta = await attempt_with_policy(
            lambda: self.fetch_loader_meta(
                manifest.minecraft_version, manifest.loader.version
            ),
            self.policy,
            description=f"fabric metadata {manifest.minecraft_version}/{manifest.loader.version}",
        )
        maven = self.config.fabric_maven_url
        libraries = [
            {"name": meta["intermediary"]["maven"], "url": maven},
            {"name": meta["loader"]["maven"], "url": maven},
        ]
        for lib in meta["launcherMeta"]["libraries"]["common"]:
            libraries.append({"name": lib["name"], "url": lib.get("url", maven)})
        return libraries
