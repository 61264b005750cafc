"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Optional

import aiohttp
import typer
from rich.console import Console
from rich.logging import RichHandler

from argeon import __version__
from argeon.api.client import ArgeonAPIClient
from argeon.core.events import EventBus
from argeon.core.factory import create_installer
from argeon.core.paths import Environment, resolve_install_target
from argeon.exceptions import ArgeonError
from argeon.launchers.launch import PrismLauncherStarter
from argeon.models.config import AppConfig, LauncherKind
from argeon.storage.config_manager import ConfigManager
from argeon.transfer import close_connection_pool

from .formatters import (
    print_config,
    print_instances_table,
    print_paths_table,
    print_summary_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("argeon")

app = typer.Typer(
    name="argeon",
    help=(
        "Installs Communivents Minecraft instances for the official launcher or"
        " PrismLauncher. Use 'argeon <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "argeon"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> AppConfig:
    return ConfigManager(CONFIG_FILE).load_config(cli_options)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Communivents instance installer"""
    if version:
        console.print(f"[bold]argeon[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("argeon").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[yellow]No config file found, defaults are in effect.[/] Run"
                " [cyan]argeon init[/cyan] to create one."
            )
            print_validation_table(AppConfig())
            raise typer.Exit()
        config_manager = ConfigManager(CONFIG_FILE)
        config_manager.load_config()
        print_config(CONFIG_FILE, config_manager._get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    api_base: Optional[str] = typer.Option(
        None, "--api-base", help="Root URL of the instance server."
    ),
    launcher: Optional[LauncherKind] = typer.Option(
        None,
        "--launcher",
        "-l",
        case_sensitive=False,
        help="Launcher used when 'install' is run without --launcher.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {}
    if api_base:
        settings["api_base"] = api_base
    if launcher:
        settings["launcher"] = launcher

    ConfigManager(CONFIG_FILE).save_new_config(settings)
    console.print(
        f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]"
    )
    console.print("Ready to install! Try: [cyan]argeon list[/cyan]")


@app.command(name="list")
def list_command():
    """List the instances available on the server."""
    config = _load_config()

    async def _list_async():
        async with ArgeonAPIClient(
            config.api_base, config.fabric_meta_url, config.request_timeout
        ) as api_client:
            return await api_client.fetch_instances()

    print_instances_table(asyncio.run(_list_async()))


@app.command()
def install(
    name: str = typer.Argument(..., help="Name of the instance to install."),
    launcher: Optional[LauncherKind] = typer.Option(
        None,
        "--launcher",
        "-l",
        case_sensitive=False,
        help="Install for 'minecraft' (official launcher) or 'prism'.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Replace an existing instance without asking. Its files are deleted.",
    ),
):
    """Download an instance and register it with a launcher."""
    cli_options = {"launcher": launcher} if launcher else {}
    config = _load_config(cli_options)

    async def _run_install(installer, events, manifest, force_install):
        async with ProgressManager(console=console, events=events) as progress_manager:
            progress_manager.start_install(manifest.name, manifest.total_files)
            result = await installer.install(manifest, config.launcher, force=force_install)
        return result, progress_manager.get_statistics()

    async def _install_async():
        events = EventBus()
        api_client = ArgeonAPIClient(
            config.api_base, config.fabric_meta_url, config.request_timeout
        )
        try:
            manifest = await api_client.find_instance(name)
            installer = create_installer(config, api_client, events)
            console.print(
                f"[bold cyan]⛏ Installing {manifest.name} for"
                f" {config.launcher.display_name}...[/bold cyan]"
            )

            start_time = time.monotonic()
            result, progress_stats = await _run_install(installer, events, manifest, force)
            if result.needs_confirmation:
                if not typer.confirm(
                    f"An instance named '{manifest.name}' already exists at"
                    f" {result.instance_path}. Replace it?"
                ):
                    console.print("[yellow]Installation cancelled.[/yellow]")
                    return None
                start_time = time.monotonic()
                result, progress_stats = await _run_install(
                    installer, events, manifest, True
                )
            return result, time.monotonic() - start_time, progress_stats
        finally:
            await close_connection_pool()
            await api_client.close()

    outcome = asyncio.run(_install_async())
    if outcome is None:
        raise typer.Exit(code=1)

    result, duration, progress_stats = outcome
    print_summary_panel(result, duration, progress_stats)
    if config.launcher is LauncherKind.THIRD_PARTY:
        console.print(f"Start it with: [cyan]argeon launch \"{result.instance_name}\"[/cyan]")


@app.command()
def paths(
    name: Optional[str] = typer.Argument(None, help="Instance name to resolve."),
    launcher: Optional[LauncherKind] = typer.Option(
        None, "--launcher", "-l", case_sensitive=False
    ),
):
    """Show where an instance would be installed on this machine."""
    config = _load_config()
    target = resolve_install_target(
        Environment.from_host(), launcher or config.launcher, name or "<instance>"
    )
    print_paths_table(target)


@app.command()
def launch(name: str = typer.Argument(..., help="Name of an installed instance.")):
    """Start an installed instance with PrismLauncher."""
    env = Environment.from_host()
    target = resolve_install_target(env, LauncherKind.THIRD_PARTY, name)
    if not Path(target.instance_path).is_dir():
        console.print(
            f"[yellow]⚠ No PrismLauncher instance found at [dim]{target.instance_path}"
            "[/dim].[/yellow]"
        )

    asyncio.run(PrismLauncherStarter(env).launch(name))
    console.print("[green]✓ Launch requested.[/green]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = _load_config()
        print_validation_table(config)
    except ArgeonError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def diagnose():
    """Diagnose common configuration, path and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    config = AppConfig()

    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print("[yellow]○[/] No config file, defaults are in effect.")
    try:
        config = _load_config()
        console.print("[green]✓[/] Configuration is valid and can be loaded.")
    except ArgeonError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        issues_found = True

    try:
        env = Environment.from_host()
        for kind in LauncherKind:
            target = resolve_install_target(env, kind, "<instance>")
            state = "exists" if Path(target.launcher_root).is_dir() else "not found"
            console.print(
                f"[green]✓[/] {kind.display_name} data: [dim]{target.launcher_root}"
                f"[/dim] ({state})"
            )
    except ArgeonError as e:
        console.print(f"[red]✗ Could not resolve launcher paths: {e}[/red]")
        issues_found = True
        env = None

    console.print("\n[dim]Testing connectivity to the instance server...[/dim]")

    async def test_connection():
        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.get(f"{config.api_base}/api/instances") as resp,
            ):
                if resp.status == 200:
                    console.print("[green]✓[/] Successfully connected to the server.")
                    return True
                console.print(
                    f"[red]✗ Could not reach the server (Status: {resp.status}).[/red]"
                )
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            console.print(f"[red]✗ Connection test failed: {e}[/red]")
            return False

    if not asyncio.run(test_connection()):
        issues_found = True

    if env is not None:
        location = asyncio.run(PrismLauncherStarter(env).locate())
        if location:
            console.print(f"[green]✓[/] PrismLauncher found: [dim]{location}[/dim]")
        else:
            console.print("[yellow]○[/] PrismLauncher not found (needed for 'launch').")

    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
