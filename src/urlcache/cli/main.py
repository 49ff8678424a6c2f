"""
CLI for inspecting and writing cache files.

Commands:
    urlcache show PATH - Summarize a cache entry
    urlcache headers PATH - Print cached headers as JSON
    urlcache cat PATH - Write cached content to stdout
    urlcache put PATH --url URL --content-file FILE - Write a cache entry
    urlcache config - Show current configuration
    urlcache version - Print version
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from urlcache import __version__
from urlcache.cache import CacheFileStore
from urlcache.config import Settings, clear_settings_cache, get_settings
from urlcache.exceptions import ChecksumMismatchError, UrlCacheError
from urlcache.logging import setup_logging

app = typer.Typer(
    name="urlcache",
    help="Inspect and write single-file URL cache entries",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError:
        return None


def _get_store() -> CacheFileStore:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'urlcache config' to see the current values."
        )
        raise typer.Exit(1)

    setup_logging(log_level=settings.LOG_LEVEL)
    try:
        return CacheFileStore.from_settings(settings)
    except UrlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise typer.BadParameter(f"Expected NAME:VALUE, got {raw!r}")
    return name.strip(), value.strip()


@app.command()
def show(
    path: Annotated[Path, typer.Argument(help="Cache file (relative to CACHE_DIR or absolute)")],
) -> None:
    """Summarize a cache entry: URL, fetch time, headers and content size."""
    store = _get_store()
    file_path = store.resolve(path)
    entry = store.get_entry(file_path)
    if entry is None:
        error_console.print(f"[yellow]No cache entry at[/yellow] {file_path}")
        raise typer.Exit(1)

    metadata = entry.metadata
    fetched_at = metadata.fetched_at
    console.print(
        Panel(
            f"[bold]URL:[/bold] {metadata.url}\n"
            f"[bold]Fetched:[/bold] {fetched_at.isoformat() if fetched_at else 'unknown'}\n"
            f"[bold]Content:[/bold] {len(entry.content)} bytes",
            title=f"[bold cyan]{file_path.name}[/bold cyan]",
            border_style="cyan",
        )
    )

    if metadata.headers:
        table = Table(title="Headers", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Value", style="green")
        for name, value in metadata.headers.items():
            table.add_row(name, value)
        console.print(table)


@app.command()
def headers(
    path: Annotated[Path, typer.Argument(help="Cache file (relative to CACHE_DIR or absolute)")],
) -> None:
    """Print the cached response headers as JSON."""
    store = _get_store()
    cached_headers = store.get_headers(path)
    if cached_headers is None:
        error_console.print(f"[yellow]No cache entry at[/yellow] {store.resolve(path)}")
        raise typer.Exit(1)
    typer.echo(json.dumps(cached_headers, indent=2))


@app.command()
def cat(
    path: Annotated[Path, typer.Argument(help="Cache file (relative to CACHE_DIR or absolute)")],
    checksum: Annotated[
        Optional[str],
        typer.Option("--checksum", "-c", help="Expected SHA-256 of the content"),
    ] = None,
) -> None:
    """Write the cached content to stdout."""
    store = _get_store()
    try:
        content = store.get(path, expected_checksum=checksum)
    except ChecksumMismatchError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if content is None:
        error_console.print(f"[yellow]No cache entry at[/yellow] {store.resolve(path)}")
        raise typer.Exit(1)
    typer.echo(content, nl=False)


@app.command()
def put(
    path: Annotated[Path, typer.Argument(help="Cache file (relative to CACHE_DIR or absolute)")],
    url: Annotated[str, typer.Option("--url", "-u", help="Source URL of the content")],
    content_file: Annotated[
        Path,
        typer.Option(
            "--content-file", "-f", exists=True, dir_okay=False, help="File holding the content"
        ),
    ],
    header: Annotated[
        Optional[list[str]],
        typer.Option("--header", "-H", help="Response header as NAME:VALUE (repeatable)"),
    ] = None,
) -> None:
    """Write a cache entry from a content file."""
    parsed_headers = dict(_parse_header(raw) for raw in header or [])
    store = _get_store()
    written = store.set(path, url, parsed_headers, content_file.read_bytes())
    if not written:
        console.print("[yellow]Cache is read-only, nothing written.[/yellow]")
        return
    console.print(f"[green]Wrote[/green] {store.resolve(path)}")


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print()
    console.print("[bold]urlcache Configuration[/bold]")
    console.print()

    settings = _get_settings_safe()

    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check the URLCACHE_* environment variables and your .env file.")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.display().items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"urlcache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
