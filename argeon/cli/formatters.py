"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from argeon.core.paths import InstallTarget
from argeon.models.config import AppConfig
from argeon.models.manifest import InstanceManifest
from argeon.models.stats import InstallResult
from argeon.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `argeon validate` to see the effective settings.",
            "• Run `argeon init` to write a fresh configuration.",
        ],
        "UnsupportedOSError": [
            "• Only Windows, macOS and Linux are supported.",
        ],
        "ManifestError": [
            "• The instance server may be temporarily unavailable.",
            "• Run `argeon list` to see which instances exist.",
            "• Check `api_base` in your configuration.",
        ],
        "LauncherConfigError": [
            "• Make sure the launcher is closed while installing.",
            "• Check that the launcher directory is writable.",
            "• A corrupted launcher_profiles.json may need to be repaired by hand.",
        ],
        "InstallInProgressError": [
            "• Wait for the running installation to finish.",
        ],
        "LauncherNotInstalledError": [
            "• Install PrismLauncher from https://prismlauncher.org.",
            "• Or install for the official launcher with `--launcher minecraft`.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• The instance server might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate a slow connection.",
            "• Increase `request_timeout` in your configuration.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            escape(content),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: AppConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Instance Server:", f"[green]{config.api_base}[/green]")
    table.add_row("Default Launcher:", config.launcher.display_name)
    table.add_row("Attempts per File:", str(config.max_attempts))
    table.add_row("Retry Delay:", f"{config.retry_delay:g}s (linear)")
    table.add_row("Request Timeout:", f"{config.request_timeout:g}s")
    table.add_row(
        "Hash Verification:", "✓ Enabled" if config.verify_hashes else "✗ Disabled"
    )
    table.add_row("Fabric Metadata:", f"[dim]{config.fabric_meta_url}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_instances_table(instances: Sequence[InstanceManifest]):
    """Lists the installable instances."""
    console = Console()
    if not instances:
        console.print("[yellow]The server has no instances to install.[/yellow]")
        return

    table = Table(title="Available Instances", box=box.ROUNDED)
    table.add_column("Name", style="bold cyan")
    table.add_column("Minecraft", style="green")
    table.add_column("Loader")
    table.add_column("Java", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Files", justify="right", style="magenta")

    for instance in instances:
        loader = (
            "vanilla"
            if instance.is_vanilla
            else f"{instance.loader.type.value} {instance.loader.version}"
        )
        table.add_row(
            escape(instance.name),
            instance.minecraft_version,
            loader,
            instance.java.minimum_version or "-",
            instance.java.recommended_memory or "-",
            str(instance.total_files),
        )
    console.print(table)


def print_paths_table(target: InstallTarget):
    """Shows where an instance would be installed."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Launcher:", target.launcher.display_name)
    table.add_row("Base Path:", str(target.base_path))
    table.add_row("Game Data Root:", str(target.game_data_root))
    table.add_row("Launcher Root:", str(target.launcher_root))
    table.add_row("Instance Path:", f"[green]{target.instance_path}[/green]")
    table.add_row("Game Data Path:", str(target.game_data_path))

    console.print(Panel(table, title="[bold]Install Target[/bold]", border_style="cyan"))


def print_summary_panel(
    result: InstallResult, duration_s: float, progress_stats: dict | None = None
):
    """Displays the final summary of an install."""
    console = Console()
    stats = result.stats

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Instance:", f"[bold]{escape(result.instance_name)}[/bold]")
    stats_table.add_row("Location:", f"[dim]{result.instance_path}[/dim]")
    stats_table.add_row("", "")

    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.files_downloaded}[/bold green]"
    )
    if stats.files_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.files_failed}[/bold red]")
    if stats.index_entries_skipped > 0:
        stats_table.add_row(
            "○ Index Entries:", f"[yellow]{stats.index_entries_skipped}[/yellow]"
        )
    if stats.attempts_made > stats.files_downloaded + stats.files_failed:
        stats_table.add_row("Attempts:", str(stats.attempts_made))

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    avg_speed = stats.total_size_downloaded / duration_s if duration_s > 0 else 0
    stats_table.add_row(
        "Avg. Speed:", f"[magenta]{format_size(int(avg_speed))}/s[/magenta]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if progress_stats and progress_stats.get("warnings"):
        stats_table.add_row("", "")
        stats_table.add_row(
            "Warnings:", f"[yellow]{progress_stats['warnings']}[/yellow]"
        )

    if result.failed_files:
        title = "⚠ [bold]Installed With Missing Files[/bold]"
        border_color = "yellow"
    else:
        title = "⛏ [bold]Instance Installed![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
