"""
Pydantic models describing a remotely published instance.
Provides validation for everything the backend sends before it touches the disk.
"""

from enum import Enum
from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterator

from pathvalidate import ValidationError as PathValidationError
from pathvalidate import validate_filename
from pydantic import BaseModel, ConfigDict, Field, field_validator

INDEX_PREFIX = ".index/"


class FileCategory(str, Enum):
    """File groupings of an instance, declared in processing order."""

    MODS = "mods"
    RESOURCEPACKS = "resourcepacks"
    SHADERPACKS = "shaderpacks"
    SAVES = "saves"
    CONFIG = "config"
    SCREENSHOTS = "screenshots"
    LOGS = "logs"
    CRASH_REPORTS = "crash-reports"
    VERSIONS = "versions"
    ASSETS = "assets"
    LIBRARIES = "libraries"


class LoaderType(str, Enum):
    VANILLA = "vanilla"
    FABRIC = "fabric"


class FileEntry(BaseModel):
    """A single downloadable file inside a category."""

    model_config = ConfigDict(frozen=True)

    filename: str
    download_url: str
    hash: str = ""
    size: int = 0

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Rejects absolute paths and anything escaping the category directory."""
        if not v or v.startswith(("/", "\\")) or PureWindowsPath(v).anchor:
            raise ValueError(f"Filename must be a relative path, got: {v!r}")
        if ".." in PurePosixPath(v.replace("\\", "/")).parts:
            raise ValueError(f"Filename cannot contain '..' segments: {v!r}")
        # Names the local OS cannot store are rejected per file at download time.
        return v

    @property
    def is_index(self) -> bool:
        """Index entries are bookkeeping markers and are never downloaded."""
        return self.filename.startswith(INDEX_PREFIX)


class Loader(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: LoaderType = LoaderType.VANILLA
    version: str = ""


class JavaRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    minimum_version: str = ""
    recommended_memory: str = ""


class DownloadUrls(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_jar: str = ""
    assets: str = ""


class InstanceManifest(BaseModel):
    """Immutable description of an installable instance."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    minecraft_version: str
    loader: Loader = Field(default_factory=Loader)
    java: JavaRequirements = Field(default_factory=JavaRequirements)
    download_urls: DownloadUrls = Field(default_factory=DownloadUrls)
    files: dict[FileCategory, list[FileEntry]] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """The name doubles as a directory name, so it must be one."""
        v = v.strip()
        try:
            validate_filename(v, platform="universal")
        except PathValidationError as e:
            raise ValueError(f"Instance name {v!r} is not a valid directory name: {e}") from e
        return v

    @field_validator("files", mode="before")
    @classmethod
    def drop_unknown_categories(cls, v):
        if not isinstance(v, dict):
            return v
        known = {c.value for c in FileCategory}
        return {k: entries for k, entries in v.items() if k in known and entries}

    @property
    def is_vanilla(self) -> bool:
        return self.loader.type == LoaderType.VANILLA

    @property
    def total_files(self) -> int:
        """Number of downloadable entries across every category."""
        return sum(
            1 for entries in self.files.values() for entry in entries if not entry.is_index
        )

    def iter_categories(self) -> Iterator[tuple[FileCategory, list[FileEntry]]]:
        """Yields non-empty categories in the fixed processing order."""
        for category in FileCategory:
            if entries := self.files.get(category):
                yield category, entries


class InstanceListResponse(BaseModel):
    """Envelope returned by ``GET /api/instances``."""

    status: str = "success"
    instances: list[InstanceManifest] = Field(default_factory=list)
