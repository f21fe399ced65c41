"""
Shared CLI startup: configuration, logging and settings.
"""

from pathlib import Path

import typer

from position_sync.config import SyncSettings, load_config
from position_sync.exceptions import ConfigurationError
from position_sync.utils.logging import get_logger, setup_logging_from_config

logger = get_logger("position_sync.cli")


def bootstrap(project_dir: Path, env: str | None, verbose: bool = False, validate: bool = True) -> SyncSettings:
    """
    Load configuration, configure logging and build settings.

    Configuration problems are reported and end the process with exit code 1.
    """
    try:
        config = load_config(project_dir, env=env)
        if verbose:
            config.data.setdefault("logging", {})["level"] = "DEBUG"
        setup_logging_from_config(config.data, project_dir=project_dir)
        settings = SyncSettings.from_config(config)
        if validate:
            settings.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from None
    return settings
