"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as the instance manifest, configuration,
events and install statistics.
"""

from .config import AppConfig, LauncherKind
from .events import (
    DownloadFailuresEvent,
    InstallCompleteEvent,
    InstallErrorEvent,
    InstallEvent,
    ProgressEvent,
)
from .manifest import (
    INDEX_PREFIX,
    FileCategory,
    FileEntry,
    InstanceListResponse,
    InstanceManifest,
    LoaderType,
)
from .stats import InstallResult, InstallStats, InstallStatus

__all__ = [
    "INDEX_PREFIX",
    "AppConfig",
    "DownloadFailuresEvent",
    "FileCategory",
    "FileEntry",
    "InstallCompleteEvent",
    "InstallErrorEvent",
    "InstallEvent",
    "InstallResult",
    "InstallStats",
    "InstallStatus",
    "InstanceListResponse",
    "InstanceManifest",
    "LauncherKind",
    "LoaderType",
    "ProgressEvent",
]
