"""
Logging configuration for position-sync.

Console output goes through Rich by default; an optional file handler writes
plain, parseable lines.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "position_sync"


class FileFormatter(logging.Formatter):
    """Formatter for file logs - clean and parseable."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


class PlainFormatter(logging.Formatter):
    """"level: timestamp - msg", with file:line added for errors."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.ERROR and record.pathname:
            message = f"{Path(record.pathname).name}:{record.lineno} - {message}"
        result = f"{record.levelname}: {self.formatTime(record)} - {message}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


# Map string level names to logging constants
LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int) -> int:
    """Parse a logging level from a name or int, defaulting to INFO."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return LEVEL_MAP.get(level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    file_mode: str = "a",
    console: Console | None = None,
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Setup logging for position-sync.

    Args:
        level: Logging level as string (DEBUG, INFO, etc.) or int (default: INFO)
        log_file: Optional file path to also write logs to
        file_mode: 'a' to append, 'w' to overwrite (default: 'a')
        console: Optional Rich Console for the RichHandler
        console_enabled: Whether to log to the console at all
        use_rich: Use RichHandler (True) or a plain stderr handler (False)

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    # Only clear handlers from our logger, never root or library loggers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level_int = _parse_level(level)
    logger.setLevel(level_int)

    if console_enabled:
        if use_rich:
            handler: logging.Handler = RichHandler(
                level=level_int,
                console=console or Console(stderr=True),
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
                log_time_format="[%X]",
                omit_repeated_times=False,
            )
        else:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(level_int)
            handler.setFormatter(PlainFormatter())
        logger.addHandler(handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode=file_mode, encoding="utf-8")
        # File captures everything the logger lets through
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def setup_logging_from_config(config: dict[str, Any], project_dir: Path | None = None) -> logging.Logger:
    """
    Setup logging from the ``logging`` section of the configuration.

    Recognised keys: ``level``, ``file``, ``file_mode``, ``console_enabled``
    and ``console_type`` ("rich" or "plain").
    """
    logging_config = config.get("logging") or {}

    level = logging_config.get("level") or logging.INFO
    log_file = logging_config.get("file") or None
    if log_file and project_dir:
        log_file = Path(log_file)
        if not log_file.is_absolute():
            log_file = project_dir / log_file

    console_enabled = _as_bool(logging_config.get("console_enabled", True))
    console_type = str(logging_config.get("console_type") or "rich").lower()

    return setup_logging(
        level=level,
        log_file=log_file,
        file_mode=logging_config.get("file_mode", "a"),
        console_enabled=console_enabled,
        use_rich=console_type == "rich",
    )


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a logger under the package namespace.

    Args:
        name: Logger name (default: "position_sync")

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
