"""
Notifications published by the installer.

Each event carries the channel name it is published on, so subscribers can
register for a single kind without importing the class.
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field


class InstallEvent(BaseModel):
    """Base class for everything sent over the event bus."""

    event_name: ClassVar[str] = ""


class ProgressEvent(InstallEvent):
    event_name: ClassVar[str] = "instanceCreationProgress"

    type: Literal["download"] = "download"
    filename: str
    current: int
    total: int
    percentage: int


class InstallCompleteEvent(InstallEvent):
    event_name: ClassVar[str] = "instanceCreationComplete"

    instanceName: str
    path: str


class InstallErrorEvent(InstallEvent):
    event_name: ClassVar[str] = "instanceCreationError"

    error: str


class DownloadFailuresEvent(InstallEvent):
    """Summary of files that could not be fetched; the install still succeeds."""

    event_name: ClassVar[str] = "instanceCreationWarning"

    instanceName: str
    message: str
    failed: list[str] = Field(default_factory=list)
