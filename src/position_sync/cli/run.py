"""
position-sync run - Execute one sync and exit.
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from position_sync.cli.bootstrap import bootstrap
from position_sync.exceptions import PositionSyncError
from position_sync.orchestrator import SyncOrchestrator, SyncResult
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.cli.run")

app = typer.Typer(name="run", help="Run one position sync", invoke_without_command=True)

console = Console()


@app.callback()
def run(
    ctx: typer.Context,
    start_date: str | None = typer.Option(None, "--start-date", "-s", help="yyyy-MM-dd or yyyy-MM-ddTHH:mm:ss"),
    end_date: str | None = typer.Option(None, "--end-date", "-e", help="yyyy-MM-dd or yyyy-MM-ddTHH:mm:ss"),
    env: str | None = typer.Option(None, help="Environment (selects config.<env>.yaml)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Fetch positions modified in the date range and write the SQL scripts.

    Without dates, positions modified since yesterday are synced.
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = bootstrap(project_dir, env, verbose=verbose)

    try:
        result = asyncio.run(SyncOrchestrator(settings).run(start_date, end_date))
    except PositionSyncError as e:
        logger.error(f"Sync failed: {e.message}")
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from None

    _print_summary(result)


def _print_summary(result: SyncResult) -> None:
    table = Table(title="Sync summary", show_header=False)
    table.add_column("metric", style="cyan")
    table.add_column("value")
    table.add_row("Fetched", str(result.total_fetched))
    table.add_row("Matched filter", str(result.total_filtered))
    table.add_row("Statements", str(result.statements_generated))
    for dialect, path in result.output_files.items():
        table.add_row(f"{dialect} file", path)
    table.add_row("Duration", f"{result.duration:.2f}s")
    console.print(table)
