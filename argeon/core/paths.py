"""
Resolves where launchers keep their data on each operating system.

Everything here is pure: the host environment is captured once into an
``Environment`` value and passed in, so the same lookups can be evaluated for
any OS from any host.
"""

import os
import platform
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import Callable, Mapping, Optional

from argeon.exceptions import ConfigurationError, UnsupportedOSError
from argeon.models.config import LauncherKind


class OperatingSystem(str, Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"

    @classmethod
    def from_name(cls, name: str) -> "OperatingSystem":
        """Maps an OS tag (``platform.system()`` style or our own) to a variant."""
        aliases = {
            "windows": cls.WINDOWS,
            "darwin": cls.MACOS,
            "macos": cls.MACOS,
            "linux": cls.LINUX,
        }
        try:
            return aliases[name.strip().lower()]
        except (KeyError, AttributeError):
            raise UnsupportedOSError(f"Unsupported operating system: {name!r}") from None

    @property
    def path_class(self) -> type[PurePath]:
        return PureWindowsPath if self is OperatingSystem.WINDOWS else PurePosixPath


@dataclass(frozen=True)
class Environment:
    """Snapshot of the host values the path lookups depend on."""

    os: OperatingSystem
    home: str
    appdata: Optional[str] = None
    local_appdata: Optional[str] = None

    @classmethod
    def from_host(cls, environ: Optional[Mapping[str, str]] = None) -> "Environment":
        """Reads the current process environment. Call once per install attempt."""
        environ = os.environ if environ is None else environ
        return cls(
            os=OperatingSystem.from_name(platform.system()),
            home=environ.get("HOME") or str(Path.home()),
            appdata=environ.get("APPDATA"),
            local_appdata=environ.get("LOCALAPPDATA"),
        )

    def path(self, *parts: str) -> PurePath:
        return self.os.path_class(*parts)


def _windows_base(env: Environment) -> PurePath:
    if not env.appdata:
        raise ConfigurationError(
            "The APPDATA environment variable is not set; cannot locate launcher data."
        )
    return env.path(env.appdata)


def _macos_base(env: Environment) -> PurePath:
    return env.path(env.home, "Library", "Application Support")


def _linux_base(env: Environment) -> PurePath:
    if not env.home:
        raise ConfigurationError("The HOME directory is unknown; cannot locate launcher data.")
    return env.path(env.home)


BASE_PATHS: dict[OperatingSystem, Callable[[Environment], PurePath]] = {
    OperatingSystem.WINDOWS: _windows_base,
    OperatingSystem.MACOS: _macos_base,
    OperatingSystem.LINUX: _linux_base,
}

GAME_DATA_DIRS: dict[OperatingSystem, tuple[str, ...]] = {
    OperatingSystem.WINDOWS: (".minecraft",),
    OperatingSystem.MACOS: ("minecraft",),
    OperatingSystem.LINUX: (".minecraft",),
}

THIRD_PARTY_DIRS: dict[OperatingSystem, tuple[str, ...]] = {
    OperatingSystem.WINDOWS: ("PrismLauncher",),
    OperatingSystem.MACOS: ("PrismLauncher",),
    OperatingSystem.LINUX: (".local", "share", "PrismLauncher"),
}

GAME_DATA_NAME = ".minecraft"


def resolve_base_path(env: Environment) -> PurePath:
    """Directory under which each launcher keeps its data."""
    return BASE_PATHS[env.os](env)


def resolve_game_data_root(env: Environment, base_path: PurePath) -> PurePath:
    """The vanilla launcher's data directory (``.minecraft`` or ``minecraft``)."""
    return base_path.joinpath(*GAME_DATA_DIRS[env.os])


def resolve_third_party_root(env: Environment, base_path: PurePath) -> PurePath:
    """PrismLauncher's data directory."""
    return base_path.joinpath(*THIRD_PARTY_DIRS[env.os])


@dataclass(frozen=True)
class InstallTarget:
    """Every directory one install attempt reads or writes."""

    launcher: LauncherKind
    base_path: PurePath
    game_data_root: PurePath
    launcher_root: PurePath
    instance_path: PurePath

    @property
    def game_data_path(self) -> PurePath:
        """The instance's own ``.minecraft`` directory."""
        return self.instance_path / GAME_DATA_NAME


def resolve_install_target(
    env: Environment, launcher: LauncherKind, instance_name: str
) -> InstallTarget:
    """Composes every path needed to install ``instance_name`` for ``launcher``."""
    base_path = resolve_base_path(env)
    game_data_root = resolve_game_data_root(env, base_path)
    if launcher is LauncherKind.GENERIC:
        launcher_root = game_data_root
    else:
        launcher_root = resolve_third_party_root(env, base_path)
    return InstallTarget(
        launcher=launcher,
        base_path=base_path,
        game_data_root=game_data_root,
        launcher_root=launcher_root,
        instance_path=launcher_root / "instances" / instance_name,
    )
