"""
position-sync serve - Long-running HTTP trigger.

Runs the sync service with:
- POST /api/sync - Trigger a sync (JSON body)
- GET /api/sync - Trigger a sync (query parameters)
- GET /health - Health check
"""

from pathlib import Path

import typer

from position_sync.cli.bootstrap import bootstrap
from position_sync.service.server import run_service

app = typer.Typer(name="serve", help="Serve the sync trigger over HTTP", invoke_without_command=True)


@app.callback()
def serve(
    ctx: typer.Context,
    env: str | None = typer.Option(None, help="Environment (selects config.<env>.yaml)"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(3000, envvar="PORT", help="Port to bind to"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Run the sync trigger as a long-running service.

    Missing credentials stop the process before it starts listening.
    """
    if ctx.invoked_subcommand is None:
        settings = bootstrap(project_dir, env, verbose=verbose)
        run_service(settings, host=host, port=port)
