"""
position-sync config - Show the resolved configuration.
"""

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax

from position_sync.cli.bootstrap import bootstrap

app = typer.Typer(name="config", help="Show the resolved configuration", invoke_without_command=True)

console = Console()


@app.callback()
def config(
    ctx: typer.Context,
    env: str | None = typer.Option(None, help="Environment (selects config.<env>.yaml)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Print settings after defaults, config files and environment are merged.

    The password is masked. Missing credentials are reported but not fatal here.
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = bootstrap(project_dir, env, validate=False)
    content = yaml.safe_dump(settings.masked(), sort_keys=False)
    console.print(Syntax(content, "yaml", theme="monokai"))

    if not settings.username or not settings.password:
        console.print("[yellow]SF_USERNAME / SF_PASSWORD are not set; run and serve will refuse to start[/yellow]")
