"""
CLI commands for deck-workspace.

Provides the `deck-workspace` command-line interface for listing the slides
of a project, inspecting the effective configuration and watching a project
for external edits.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from deck_workspace import __version__
from deck_workspace.config import ConfigurationLoader
from deck_workspace.core.deck.scanner import scan_slides
from deck_workspace.core.models.config import GlobalSettings, WorkspaceConfig
from deck_workspace.core.models.slides import Slide
from deck_workspace.core.models.workspace import LogLevel, LogMessage
from deck_workspace.core.workspace import ConsoleLog, WorkspaceCoordinator

console = Console()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure root logging from global settings"""
    settings = GlobalSettings()
    level = (log_level or settings.log_level).upper()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = settings.get_log_file()
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT, handlers=handlers)


def _load_config(project: Path, interval_ms: Optional[int] = None, content_hash: bool = False) -> WorkspaceConfig:
    config = ConfigurationLoader().load_workspace_config(project)
    config = config.model_copy(deep=True)
    if interval_ms is not None:
        config.polling.poll_interval_ms = interval_ms
    if content_hash:
        config.polling.change_signal = "content-hash"
    return config


@click.group()
@click.version_option(version=__version__, prog_name="deck-workspace")
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Logging level (default: DECK_WORKSPACE_LOG_LEVEL or INFO)'
)
def main(log_level: Optional[str]):
    """
    Deck Workspace CLI.

    Inspect and watch slide-deck projects.
    """
    setup_logging(log_level)


@main.command()
@click.argument('project', type=click.Path(exists=True, file_okay=False, path_type=Path), default='.')
@click.option('--slides-dir', default=None, help='Slides directory relative to the project')
def slides(project: Path, slides_dir: Optional[str]):
    """List the slides of a project in display order."""
    config = _load_config(project)
    found = scan_slides(project, slides_dir or config.slides_dir)

    if not found:
        console.print(f"[yellow]⚠️  No slides found in {project / (slides_dir or config.slides_dir)}[/yellow]")
        return

    table = Table(title=f"Slides ({len(found)})")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Slide", style="white")
    table.add_column("Path", style="dim")

    for position, slide in enumerate(found, start=1):
        table.add_row(str(position), slide.id, slide.path)

    console.print(table)


@main.command('config')
@click.argument('project', type=click.Path(exists=True, file_okay=False, path_type=Path), required=False)
def show_config(project: Optional[Path]):
    """Show the effective workspace configuration."""
    config = ConfigurationLoader().load_workspace_config(project)
    console.print_json(json.dumps(config.to_dict()))


@main.command()
@click.argument('project', type=click.Path(exists=True, file_okay=False, path_type=Path), default='.')
@click.option('--interval-ms', type=click.IntRange(min=10), default=None, help='Polling interval in milliseconds')
@click.option('--duration', type=click.FloatRange(min=0), default=0.0, help='Stop after this many seconds (0: run until interrupted)')
@click.option('--content-hash', is_flag=True, help='Detect changes by content digest instead of modification time')
def watch(project: Path, interval_ms: Optional[int], duration: float, content_hash: bool):
    """Watch a project's slides and report external edits."""
    config = _load_config(project, interval_ms=interval_ms, content_hash=content_hash)
    found = scan_slides(project, config.slides_dir)

    if not found:
        console.print(f"[yellow]⚠️  No slides to watch in {config.get_slides_path()}[/yellow]")
        return

    console.print(
        f"[blue]👀 Watching {len(found)} slides in {config.get_slides_path()} "
        f"(every {config.polling.poll_interval_ms}ms, {config.polling.change_signal})[/blue]"
    )

    try:
        asyncio.run(_watch_project(config, found, duration))
    except KeyboardInterrupt:
        pass

    console.print("[blue]Stopped watching[/blue]")


async def _watch_project(config: WorkspaceConfig, found: List[Slide], duration: float) -> None:
    workspace_console = ConsoleLog(max_entries=config.max_console_entries)

    def print_entry(entry: LogMessage) -> None:
        style = "red" if entry.level == LogLevel.ERROR else "yellow"
        console.print(f"[{style}]{entry}[/{style}]")

    def print_change(path: str) -> None:
        console.print(f"[green]✏️  Changed: {path}[/green]")

    workspace_console.add_listener(print_entry)

    async with WorkspaceCoordinator.from_config(
        config,
        console=workspace_console,
        on_file_change=print_change
    ) as coordinator:
        coordinator.open_project(config.project_path, found)
        await coordinator.wait_for_content()

        current = coordinator.deck.current_slide
        if current is not None:
            console.print(f"[dim]Selected {current.id} ({coordinator.progress:.0f}%)[/dim]")

        if duration > 0:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()


if __name__ == '__main__':
    main()
