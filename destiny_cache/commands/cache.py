"""Commands for inspecting the synced cache."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from destiny_cache.commands.sync import _get_context_objects, report_failure
from destiny_cache.core.errors import SyncError
from destiny_cache.core.store import CacheWriter, create_redis_client
from destiny_cache.core.types import EntityRecord


def _show_record(key: str, record: EntityRecord, console: Console) -> None:
    table = Table(title=f"Definition {key}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    display = record.display_properties
    table.add_row("Name", display.name or "N/A")
    table.add_row("Description", display.description or "N/A")
    table.add_row("Icon", display.icon if display.has_icon else "N/A")
    table.add_row("Mode", "N/A" if record.mode is None else str(record.mode))
    table.add_row("Release Icon", record.release_icon or "N/A")
    table.add_row("Release Time", str(record.release_time))

    console.print(table)


@click.group(name="cache")
def cache_group() -> None:
    """Inspect the synced cache."""


@cache_group.command()
@click.argument("key")
@click.pass_context
def get(ctx: click.Context, key: str) -> None:
    """Show the cached definition stored under KEY."""
    config, console, _verbose = _get_context_objects(ctx)

    try:
        record = CacheWriter(create_redis_client(config.redis)).get(key)
    except SyncError as e:
        report_failure(console, e)
        return

    if record is None:
        console.print(f"[yellow]Key {key} not found[/yellow]")
        ctx.exit(1)

    if config.output_format == "json":
        print(json.dumps(record.model_dump(by_alias=True), indent=2))
    else:
        _show_record(key, record, console)


@cache_group.command()
@click.pass_context
def count(ctx: click.Context) -> None:
    """Show the number of cached keys."""
    config, console, _verbose = _get_context_objects(ctx)

    try:
        total = CacheWriter(create_redis_client(config.redis)).count()
    except SyncError as e:
        report_failure(console, e)
        return

    if config.output_format == "json":
        print(json.dumps({"count": total}))
    else:
        console.print(f"{total} keys cached")
