"""Command line interface for Trello Monitor."""

from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .cache import StalenessCache
from .config import Config, config_manager
from .models.movement import actions_to_movements
from .services.trello_client import TrelloClient
from .sinks import CsvMovementSink, GoogleSheetsMovementSink
from .utils.error_handling import ErrorHandler
from .utils.logging_setup import setup_logging
from . import __version__


def build_cache(config: Config) -> StalenessCache:
    """Create the staleness cache described by ``config``."""
    return StalenessCache(
        cache_dir=config.cache.directory,
        lifetime_ms=config.cache.lifetime_ms,
        stale_after_ms=config.cache.stale_after_ms,
    )


def build_trello_client(config: Config, cache: StalenessCache) -> TrelloClient:
    """Create a Trello client that reads through ``cache``."""
    return TrelloClient(
        api_key=config.trello.api_key,
        token=config.trello.token,
        cache=cache,
        base_url=config.trello.api_url,
        timeout=config.trello.timeout_seconds,
        max_attempts=config.trello.max_attempts,
    )


def print_boards(console: Console, boards) -> None:
    table = Table(title="Available boards", show_header=True, header_style="bold blue")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for board in boards:
        table.add_row(board.get("id", ""), board.get("name", ""))
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Path to configuration file"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool):
    """Trello Monitor - track card movements between Trello lists.

    Fetches board actions from Trello (cached to respect the rate limit)
    and keeps a deduplicated, chronological log of card movements in a CSV
    file and optionally a Google Sheet.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = Console()
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)
    setup_logging(verbose)

    try:
        if config:
            config_manager.config_path = config
            config_manager.reload()
        ctx.obj["config"] = config_manager.config
    except Exception as e:
        ctx.obj["error_handler"].report("loading configuration", e)
        ctx.exit(1)


@cli.command()
@click.argument("board_id")
@click.argument("spreadsheet_id", required=False)
@click.option("--fresh", is_flag=True, help="Ignore cached Trello data")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False), default=None, help="CSV file to update"
)
@click.pass_context
def sync(
    ctx: click.Context,
    board_id: str,
    spreadsheet_id: Optional[str],
    fresh: bool,
    output: Optional[str],
):
    """Record card movements of a board.

    BOARD_ID: Trello board to read actions from
    SPREADSHEET_ID: Google Sheet to update as well (optional)
    """
    console = ctx.obj["console"]
    config = ctx.obj["config"]
    cache_store = build_cache(config)

    try:
        client = build_trello_client(config, cache_store)

        boards = client.get_boards(force_fresh=fresh)
        print_boards(console, boards)

        actions = client.get_board_actions(board_id, force_fresh=fresh)
        movements = actions_to_movements(actions)
        click.echo(f"Found {len(movements)} card movements on board {board_id}")

        sinks = [CsvMovementSink(output or config.output.csv_path)]
        if spreadsheet_id:
            sinks.append(
                GoogleSheetsMovementSink(
                    spreadsheet_id,
                    credentials_file=config.sheets.credentials_file,
                    sheet_name=config.sheets.sheet_name,
                )
            )

        for sink in sinks:
            added = sink.sync(movements)
            if added:
                click.echo(f"{sink.name}: {added} new movements written")
            else:
                click.echo(f"{sink.name}: no new movements")

    except Exception as e:
        ctx.obj["error_handler"].report("syncing movements", e)
        ctx.exit(1)
    finally:
        # Let stale-entry refreshes land before the process exits
        cache_store.wait_for_refreshes()
        cache_store.shutdown()


@cli.command()
@click.option("--fresh", is_flag=True, help="Ignore cached Trello data")
@click.pass_context
def boards(ctx: click.Context, fresh: bool):
    """List the boards visible to the configured Trello account."""
    config = ctx.obj["config"]
    cache_store = build_cache(config)

    try:
        client = build_trello_client(config, cache_store)
        print_boards(ctx.obj["console"], client.get_boards(force_fresh=fresh))
    except Exception as e:
        ctx.obj["error_handler"].report("listing boards", e)
        ctx.exit(1)
    finally:
        cache_store.wait_for_refreshes()
        cache_store.shutdown()


# === Cache management commands ===


@cli.group()
def cache():
    """Cache management commands.

    Manage the local cache of Trello API responses.
    """
    pass


@cache.command("status")
@click.pass_context
def cache_status(ctx: click.Context):
    """Show cache status and entry freshness."""
    console = ctx.obj["console"]

    try:
        stats = build_cache(ctx.obj["config"]).stats()

        console.print("[bold cyan]Cache Status[/bold cyan]")
        console.print()
        console.print(f"[dim]Directory:[/dim] {stats['cache_dir']}")
        console.print(f"[dim]Lifetime:[/dim] {stats['lifetime_hours']:g} hours")
        console.print(f"[dim]Stale after:[/dim] {stats['stale_after_minutes']:g} minutes")
        console.print(f"[dim]Size:[/dim] {stats['total_bytes'] / 1024:.1f} KB")
        console.print()

        if not stats["entries"]:
            console.print("Cache is empty.")
            return

        table = Table(show_header=True, header_style="bold blue")
        table.add_column("Key", style="cyan")
        table.add_column("Age", justify="right")
        table.add_column("Status")

        status_styles = {"fresh": "green", "stale": "yellow", "expired": "red", "corrupt": "red"}
        for entry in stats["entries"]:
            age = entry["age_seconds"]
            age_text = f"{age / 60:.0f} min" if age is not None else "-"
            style = status_styles.get(entry["status"], "white")
            table.add_row(entry["key"], age_text, f"[{style}]{entry['status']}[/{style}]")

        console.print(table)

    except Exception as e:
        ctx.obj["error_handler"].report("getting cache status", e)
        ctx.exit(1)


@cache.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def cache_clear(ctx: click.Context, yes: bool):
    """Delete all cached Trello responses."""
    if not yes:
        if not click.confirm("This will delete all cached data. Continue?"):
            click.echo("Cancelled.")
            return

    try:
        removed = build_cache(ctx.obj["config"]).clear()
        click.echo(f"Cache cleared ({removed} entries removed).")
    except Exception as e:
        ctx.obj["error_handler"].report("clearing cache", e)
        ctx.exit(1)


def main():
    """Entry point for the CLI application."""
    cli()
