"""
Main CLI entry point.
"""

import typer

from position_sync import __version__
from position_sync.cli import config, run, serve


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"position-sync version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="position-sync",
    help="position-sync - SuccessFactors positions to Oracle/PostgreSQL insert scripts",
    add_completion=False,
)

app.add_typer(run.app, name="run")
app.add_typer(serve.app, name="serve")
app.add_typer(config.app, name="config")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    position-sync - SuccessFactors positions to Oracle/PostgreSQL insert scripts.

    Run 'position-sync <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
