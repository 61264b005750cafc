"""
Starts an installed instance through PrismLauncher.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

from argeon.core.paths import Environment, OperatingSystem
from argeon.exceptions import LauncherNotInstalledError

log = logging.getLogger(__name__)

MACOS_APP_NAME = "Prism Launcher"
LINUX_EXECUTABLES = ("prismlauncher", "PrismLauncher")


class PrismLauncherStarter:
    """Locates PrismLauncher and asks it to launch an instance by name."""

    def __init__(self, env: Environment):
        self.env = env

    async def locate(self) -> Optional[str]:
        """Path of the launcher executable (or app name on macOS), if installed."""
        if self.env.os is OperatingSystem.WINDOWS:
            if not self.env.local_appdata:
                return None
            exe = Path(self.env.local_appdata) / "Programs" / "PrismLauncher" / "prismlauncher.exe"
            return str(exe) if exe.is_file() else None

        if self.env.os is OperatingSystem.MACOS:
            query = (
                "kMDItemKind == 'Application' && "
                f"kMDItemFSName == '{MACOS_APP_NAME}.app'"
            )
            stdout = await self._run("mdfind", query)
            return MACOS_APP_NAME if stdout.strip() else None

        for name in LINUX_EXECUTABLES:
            if found := shutil.which(name):
                return found
        return None

    async def launch(self, instance_name: str) -> None:
        """
        Raises:
            LauncherNotInstalledError: If PrismLauncher cannot be found.
        """
        location = await self.locate()
        if not location:
            raise LauncherNotInstalledError("PrismLauncher is not installed!")

        log.info(f"Launching [cyan]{instance_name}[/cyan] with PrismLauncher...")
        if self.env.os is OperatingSystem.MACOS:
            # A running launcher ignores --launch, so quit it first.
            await self._run(
                "osascript", "-e", f'tell application "{MACOS_APP_NAME}" to quit'
            )
            await self._spawn(
                "open", "-a", MACOS_APP_NAME, "--args", "--launch", instance_name
            )
        else:
            await self._spawn(location, "--launch", instance_name)

    async def _run(self, *args: str) -> str:
        """Runs a helper command to completion and returns its stdout."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError:
            log.debug(f"Helper command '{args[0]}' is not available.")
            return ""
        stdout, _ = await proc.communicate()
        return stdout.decode(errors="replace")

    async def _spawn(self, *args: str) -> None:
        """Starts a detached process without waiting for it."""
        await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )
        log.debug(f"Spawned: {' '.join(args)}")
