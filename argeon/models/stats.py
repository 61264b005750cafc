"""
Dataclasses for tracking install statistics and reporting the outcome of an install.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath


@dataclass
class InstallStats:
    """Tracks statistics for one install run."""

    files_downloaded: int = 0
    files_failed: int = 0
    index_entries_skipped: int = 0
    attempts_made: int = 0
    total_size_downloaded: int = 0
    started_at: float = field(default_factory=time.monotonic, repr=False)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def record_success(self, size: int) -> None:
        self.files_downloaded += 1
        self.total_size_downloaded += size

    def record_failure(self) -> None:
        self.files_failed += 1


class InstallStatus(str, Enum):
    CREATED = "created"
    NEEDS_CONFIRMATION = "needs_confirmation"


@dataclass
class InstallResult:
    """
    Outcome of one ``install`` call.

    Truthy only when the instance was created, so callers can treat it like the
    boolean "created / not created" answer.
    """

    status: InstallStatus
    instance_name: str
    instance_path: PurePath
    failed_files: list[str] = field(default_factory=list)
    stats: InstallStats = field(default_factory=InstallStats)

    def __bool__(self) -> bool:
        return self.status == InstallStatus.CREATED

    @property
    def needs_confirmation(self) -> bool:
        return self.status == InstallStatus.NEEDS_CONFIRMATION
