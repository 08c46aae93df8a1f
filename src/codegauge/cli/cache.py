"""Cache management commands."""

from pathlib import Path
from typing import Optional

import typer

from ..cache import AnalysisCache
from ..exceptions import ConfigurationError
from . import app
from ._common import EXIT_CONFIG_ERROR, cache_directory, console, resolve_config


def _open_cache(config: Optional[Path], cache_dir: Optional[Path]) -> AnalysisCache:
    try:
        settings = resolve_config(config=config, cache_dir=cache_dir)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    return AnalysisCache.from_config(settings, directory=cache_directory(settings))


@app.command()
def cache_info(
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Configuration file (TOML)"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Cache directory"),
):
    """Show cache information and statistics."""
    cache = _open_cache(config, cache_dir)
    try:
        stats = cache.stats()
    finally:
        cache.close()

    console.print("[bold cyan]codegauge cache info[/bold cyan]")
    console.print()
    if stats["persistent"]:
        console.print("Status: [green]Available[/green]")
    else:
        console.print("Status: [red]Unavailable[/red] (memory only)")
    console.print(f"Directory: [blue]{stats.get('directory') or 'N/A'}[/blue]")
    console.print(f"Version: {stats['version']}")
    console.print(f"Entries: [yellow]{stats.get('disk_entries', 0)}[/yellow]")
    console.print(f"Size: [yellow]{stats.get('volume', 0)} bytes[/yellow]")


@app.command()
def cache_clear(
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Configuration file (TOML)"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Cache directory"),
):
    """Clear the analysis cache."""
    cache = _open_cache(config, cache_dir)
    try:
        cache.clear()
    finally:
        cache.close()
    console.print("[green]Cache cleared successfully[/green]")
