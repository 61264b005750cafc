"""
Renders installer events as a Rich progress display.
"""

import asyncio

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from argeon.core.events import EventBus
from argeon.models.events import (
    DownloadFailuresEvent,
    InstallCompleteEvent,
    InstallErrorEvent,
    InstallEvent,
    ProgressEvent,
)



class ProgressManager:
    """Subscribes to an ``EventBus`` and drives one overall progress bar."""

    def __init__(self, console: Console, events: EventBus):
        self.console = console
        self.events = events
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.fields[instance]}"),
            BarColumn(bar_width=40),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            MofNCompleteColumn(),
            "•",
            TextColumn("[dim]{task.description}", justify="left"),
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None
        self._unsubscribe = None
        self._stats = {"progress_events": 0, "warnings": 0, "errors": 0}

    def start_install(self, instance_name: str, total_files: int) -> None:
        if self._task_id is not None:
            self.progress.remove_task(self._task_id)
        self._task_id = self.progress.add_task(
            "preparing...", total=max(total_files, 1), instance=escape(instance_name)
        )

    def _handle(self, event: InstallEvent) -> None:
        if isinstance(event, ProgressEvent):
            self._stats["progress_events"] += 1
            if self._task_id is not None:
                self.progress.update(
                    self._task_id,
                    completed=event.current - 1,
                    total=max(event.total, 1),
                    description=escape(event.filename),
                )
        elif isinstance(event, DownloadFailuresEvent):
            self._stats["warnings"] += 1
            self.console.print(f"[yellow]⚠ {escape(event.message)}[/yellow]")
            self.console.print(
                "[dim]Some files might be missing from the installation.[/dim]"
            )
        elif isinstance(event, InstallCompleteEvent):
            if self._task_id is not None:
                task = self.progress.tasks[self._task_id]
                self.progress.update(
                    self._task_id, completed=task.total, description="done"
                )
        elif isinstance(event, InstallErrorEvent):
            self._stats["errors"] += 1
            if self._task_id is not None:
                self.progress.update(self._task_id, description="[red]failed[/red]")

    def get_statistics(self) -> dict:
        return self._stats.copy()

    async def __aenter__(self):
        self._unsubscribe = self.events.subscribe(EventBus.ALL, self._handle)
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._unsubscribe:
            self._unsubscribe()
        await asyncio.sleep(0.1)
        self.progress.stop()
