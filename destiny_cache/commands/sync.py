"""Sync and manifest commands."""

from __future__ import annotations

import json
import sys

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from destiny_cache.core.api import ManifestClient
from destiny_cache.core.config import AppConfig
from destiny_cache.core.errors import SyncError
from destiny_cache.core.sync import SyncResult, run_sync
from destiny_cache.core.types import DefinitionType
from destiny_cache.core.utils import format_duration

logger = structlog.get_logger()


def _get_context_objects(ctx: click.Context) -> tuple[AppConfig, Console, bool]:
    """Extract common context objects."""
    config: AppConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    verbose: bool = ctx.obj["verbose"]
    return config, console, verbose


def report_failure(console: Console, error: SyncError) -> None:
    """Log a failed run once and exit non-zero."""
    detail = getattr(error, "key", None) or getattr(error, "url", None)
    logger.error("sync_failed", stage=error.stage, detail=detail, error=str(error))
    console.print(f"[red]Error in {error.stage}: {escape(str(error))}[/red]")
    sys.exit(1)


def _show_summary(result: SyncResult, console: Console) -> None:
    table = Table(title="Sync Summary")
    table.add_column("Source", style="cyan")
    table.add_column("Entries", style="magenta", justify="right")

    for definition, count in result.counts.items():
        table.add_row(definition.value.title(), str(count))
    table.add_row(f"Activities (mode {result.activity_mode})", str(result.filtered_activities))
    table.add_row("Merged", str(result.merged))
    table.add_row("Written", str(result.written))

    console.print(table)
    console.print(f"[green]Sync completed in {format_duration(result.elapsed)}[/green]")


@click.command()
@click.option("--mode", type=int, help="Activity mode type to keep (overrides config)")
@click.option("--workers", type=click.IntRange(min=1), help="Concurrent definition downloads")
@click.option("--deadline", type=click.FloatRange(min=0, min_open=True), help="Overall deadline in seconds")
@click.pass_context
def sync(ctx: click.Context, mode: int | None, workers: int | None, deadline: float | None) -> None:
    """Replace the cache contents with the current definitions."""
    config, console, _verbose = _get_context_objects(ctx)

    updates: dict[str, object] = {}
    if mode is not None:
        updates["activity_mode"] = mode
    if workers is not None:
        updates["max_workers"] = workers
    if deadline is not None:
        updates["deadline"] = deadline
    if updates:
        config = config.model_copy(update=updates)

    try:
        result = run_sync(config)
    except SyncError as e:
        report_failure(console, e)
        return

    if config.output_format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _show_summary(result, console)


@click.command()
@click.pass_context
def manifest(ctx: click.Context) -> None:
    """Show the definition paths the manifest currently publishes."""
    config, console, _verbose = _get_context_objects(ctx)

    try:
        with ManifestClient(config.api) as client:
            paths = client.resolve_manifest()
            urls = {definition.value: client.build_url(paths.path_for(definition)) for definition in DefinitionType}
    except SyncError as e:
        report_failure(console, e)
        return

    if config.output_format == "json":
        print(json.dumps(urls, indent=2))
        return

    table = Table(title=f"Content Paths ({config.api.language})")
    table.add_column("Definition", style="cyan")
    table.add_column("URL", style="magenta")
    for name, url in urls.items():
        table.add_row(name, url)
    console.print(table)
